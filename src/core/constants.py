"""
Trading floor constants.

Defaults for the world economy, intent lifecycle and collaborator wiring.
Every value here can be overridden through Settings.
"""

DEFAULT_APP_PORT = 8800

# Economy
DEFAULT_FEE_RATE = 0.003  # 0.3% per leg
DEFAULT_ENTRY_FEE_USDC = 1.0
DEFAULT_SUPPORTED_TOKENS = ["USDC", "ETH", "SOL", "MON", "BTC"]
DEFAULT_TOKEN_PRICES_USD = {
    "USDC": 1.0,
    "ETH": 2800.0,
    "SOL": 120.0,
    "MON": 0.5,
    "BTC": 98000.0,
}

# Intents
INTENT_TTL_SECONDS = 60 * 60
DEFAULT_MAX_SLIPPAGE = 0.01

# Reputation
REPUTATION_INITIAL = 100
REPUTATION_PER_SWAP = 5

# World views
EVENT_LOG_LIMIT = 1000
EVENTS_PAGE_LIMIT = 100
RECENT_EVENTS_IN_WORLD_STATE = 20
LEADERBOARD_SIZE = 20
LEADERBOARD_IN_WORLD_STATE = 10
SWAP_HISTORY_DEFAULT_LIMIT = 50

# $SWAP governance token
SWAP_TOTAL_SUPPLY = 1_000_000_000
SWAP_REWARD_PER_USD = 100
GOVERNANCE_VOTING_PERIOD_SECONDS = 24 * 60 * 60

# On-chain rewards (Base mainnet)
BASE_RPC_URL = "https://mainnet.base.org"
SWAP_TOKEN_ADDRESS = "0xA70DA9E19d102163983E3061c5Ade715f0dD36d3"
SWAP_SETTLER_ADDRESS = "0x0800Bd274441674f84526475a5daB5E7571e0Aa4"
SWAP_DAO_ADDRESS = "0x27CfE2255dae29624D8DA82E6D389dcE5af0206B"
BASE_REWARD_PER_SWAP_WEI = 1000 * 10**18
BASE_CHAIN_ID = 8453
ERC8004_REGISTRY_ADDRESS = "0x8004A169FB4a3325136EB29fA0ceB6D2e539a432"
ERC8004_AGENT_ID = 2065
CHAIN_STATE_CACHE_SECONDS = 15

# Price oracle
JUPITER_PRICE_API = "https://api.jup.ag/price/v2"
PRICE_REFRESH_INTERVAL_SECONDS = 60
PRICE_ORACLE_TIMEOUT_SECONDS = 10.0
TOKEN_MINTS = {
    "SOL": "So11111111111111111111111111111111111111112",
    "USDC": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
    "BTC": "3NZ9JMVBmGAqocybic2c7LQCJScmgsAZ6vQqTDzcqmJh",  # wBTC (Wormhole)
    "ETH": "7vfCXTUXx5WJV5JADk17DUJ4ksgau7utNKj4b963voxs",  # wETH (Wormhole)
}
