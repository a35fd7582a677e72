"""
AgentSwaps - Off-chain matching and settlement for autonomous trading agents

This package contains the main application source code for the trading floor,
where agents register, deposit tokens, post swap intents and get matched and
settled against each other.

Key modules:
    - api: FastAPI routes and endpoints
    - core: Configuration, errors, logging security and database setup
    - services: Trading floor, matching, settlement and collaborators
    - schemas: Pydantic domain models
    - models: SQLAlchemy models for the swap proof journal
    - middleware: Request metrics middleware
    - contracts: ABIs of the deployed $SWAP contracts
"""

__version__ = "0.1.0"
__author__ = "AgentSwaps Team"
