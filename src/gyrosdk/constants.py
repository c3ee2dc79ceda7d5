"""Protocol-wide constants."""

# Precision of the Gyro fund token and of every protocol estimate
DECIMALS = 18

# Gas ceiling applied to every mutating call
GAS_LIMIT = 3_000_000

# Seconds to wait for a transaction receipt
TX_TIMEOUT = 120.0

# Allowance treated as "effectively unlimited" when approving for future use
UNLIMITED_APPROVAL = 10**50

# Chain id -> deployment network name
NETWORKS: dict[int, str] = {
    1337: "localhost",
    31337: "localhost",
    42: "kovan",
}

# Contract names as they appear in deployment files
FUND_CONTRACT = "GyroFundV1"
LIB_CONTRACT = "GyroLib"
