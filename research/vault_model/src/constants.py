# Fixed point scale factors
WAD = 1_000_000_000_000_000_000  # 1e18, collateral / debt / health factor scale
UINT256_MAX = 2**256 - 1

# Health factor constants
DEFAULT_MIN_HEALTH_FACTOR = WAD * 120 // 100  # 120%
MAX_HEALTH_FACTOR = UINT256_MAX  # closed or debt-free position

# Oracle constants
DEFAULT_ORACLE_DECIMALS = 8  # Chainlink USD feeds

# Identity constants
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
VAULT_ADDRESS = "0x0000000000000000000000000000000000005afe"  # custody account of the in-process vault
