"""
Exchange constants for Polygon mainnet (chain ID 137).

Source: https://github.com/Polymarket/ctf-exchange and
https://github.com/Polymarket/neg-risk-ctf-adapter (addresses.json)
"""

DEFAULT_CHAIN_ID = 137

# Exchange contracts (EIP-712 verifying contracts for orders)
EXCHANGE_ADDRESS = "0x4bFb41d5B3570DeFd03C39a9A4D8dE6Bd8B8982E"  # CTF Exchange
NEG_RISK_EXCHANGE_ADDRESS = "0xC5d563A36AE78145C45a50134d48A1215220f80a"  # Neg-Risk CTF Exchange

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Order signing domain
ORDER_DOMAIN_NAME = "Polymarket CTF Exchange"
ORDER_DOMAIN_VERSION = "1"

# L1 authentication domain
AUTH_DOMAIN_NAME = "ClobAuthDomain"
AUTH_DOMAIN_VERSION = "1"
AUTH_MESSAGE = "This message attests that I control the given wallet"

# Collateral (USDC) and conditional tokens both use 6 decimals
TOKEN_DECIMALS = 6
