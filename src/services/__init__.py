"""
Business logic services package.

This package contains the trading floor and its collaborators.

Services are imported on-demand to avoid circular import issues.
Individual services should be imported directly from their modules:
  from src.services.trading_floor import TradingFloor
  from src.services.alerting_service import AlertType, send_error_alert
  etc.
"""

__all__ = [
    "AgentRegistry",
    "AlertingService",
    "EventLog",
    "GovernanceService",
    "IntentBook",
    "JupiterPriceOracle",
    "MatchingEngine",
    "MetricsCollector",
    "NotificationDispatcher",
    "OnChainRewardDistributor",
    "PriceRefresher",
    "SettlementEngine",
    "SwapProofRecorder",
    "TokenLedger",
    "TradingFloor",
    "WorldState",
]
