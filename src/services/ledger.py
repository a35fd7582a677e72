"""
Token ledger.

Per-agent free balances for the supported asset set, plus the running total
each agent has deposited. Pure bookkeeping: callers hold the trading floor
lock, the ledger itself does no locking.
"""

import logging
from decimal import Decimal

from src.core.errors import (
    InsufficientBalanceError,
    InvalidAmountError,
    NotFoundError,
    UnsupportedAssetError,
)
from src.schemas.trading import Asset

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def to_decimal(value: Decimal | float | int | str) -> Decimal:
    """Convert request amounts to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except ArithmeticError as e:
        raise InvalidAmountError(f"Invalid amount: {value}") from e


def require_positive(amount: Decimal | float | int | str) -> Decimal:
    value = to_decimal(amount)
    if not value.is_finite() or value <= ZERO:
        raise InvalidAmountError("Amount must be positive")
    return value


class TokenLedger:
    """Free balances keyed by agent name and asset."""

    def __init__(self, supported: list[Asset] | None = None):
        self.supported: list[Asset] = list(supported or list(Asset))
        self._accounts: dict[str, dict[Asset, Decimal]] = {}
        self._deposited: dict[str, dict[Asset, Decimal]] = {}

    def parse_asset(self, symbol: str | Asset) -> Asset:
        """Validate a symbol against the configured asset set."""
        if isinstance(symbol, Asset):
            asset = symbol
        else:
            try:
                asset = Asset(str(symbol).strip().upper())
            except ValueError:
                raise UnsupportedAssetError(f"Token {symbol} not supported") from None
        if asset not in self.supported:
            raise UnsupportedAssetError(f"Token {asset.value} not supported")
        return asset

    def open_account(self, name: str) -> None:
        self._accounts[name] = {asset: ZERO for asset in self.supported}
        self._deposited[name] = {asset: ZERO for asset in self.supported}

    def has_account(self, name: str) -> bool:
        return name in self._accounts

    def _account(self, name: str) -> dict[Asset, Decimal]:
        try:
            return self._accounts[name]
        except KeyError:
            raise NotFoundError(f"Agent {name} not found") from None

    def balance(self, name: str, asset: Asset) -> Decimal:
        return self._account(name).get(asset, ZERO)

    def balances(self, name: str) -> dict[Asset, Decimal]:
        """Copy of an agent's free balances."""
        return dict(self._account(name))

    def deposited(self, name: str) -> dict[Asset, Decimal]:
        self._account(name)
        return dict(self._deposited[name])

    def deposit(self, name: str, asset: Asset, amount: Decimal) -> Decimal:
        """External funds entering the floor."""
        account = self._account(name)
        value = require_positive(amount)
        account[asset] = account.get(asset, ZERO) + value
        self._deposited[name][asset] = self._deposited[name].get(asset, ZERO) + value
        return account[asset]

    def credit(self, name: str, asset: Asset, amount: Decimal) -> Decimal:
        """Internal movement into a free balance (settlement, escrow release)."""
        if amount < ZERO:
            raise InvalidAmountError("Credit amount cannot be negative")
        account = self._account(name)
        account[asset] = account.get(asset, ZERO) + amount
        return account[asset]

    def debit(self, name: str, asset: Asset, amount: Decimal) -> Decimal:
        """Remove funds from a free balance; never goes negative."""
        account = self._account(name)
        available = account.get(asset, ZERO)
        if available < amount:
            raise InsufficientBalanceError(
                f"Insufficient {asset.value} balance. Have: {available}, Need: {amount}"
            )
        account[asset] = available - amount
        return account[asset]

    def total_free(self, asset: Asset) -> Decimal:
        return sum((account.get(asset, ZERO) for account in self._accounts.values()), ZERO)

    def total_deposited(self, asset: Asset) -> Decimal:
        return sum((totals.get(asset, ZERO) for totals in self._deposited.values()), ZERO)
