"""Exception hierarchy for the Gyro client.

Remote call failures (contract reverts, transport errors) are NOT wrapped
here; they propagate from web3 unchanged.
"""

from typing import Optional


class GyroError(Exception):
    """Base exception for client-side Gyro errors."""
    pass


class UnsupportedNetworkError(GyroError):
    """Raised when the connected chain id has no known Gyro deployment."""

    def __init__(self, chain_id: int):
        self.chain_id = chain_id
        super().__init__(f"network {chain_id} not supported")


class DeploymentNotFoundError(GyroError):
    """Raised when a known network has no address configured for a contract."""

    def __init__(self, network: str, contract: Optional[str] = None):
        self.network = network
        self.contract = contract
        if contract:
            message = f"no {contract} address configured for network '{network}'"
        else:
            message = f"no deployment configured for network '{network}'"
        super().__init__(message)


class InvalidBasketError(GyroError, ValueError):
    """Raised when a mint/redeem basket is empty or holds negative amounts."""
    pass


class ReserveDataError(GyroError):
    """Raised when reserve addresses and amounts cannot be aligned."""

    def __init__(self, addresses_count: int, amounts_count: int):
        self.addresses_count = addresses_count
        self.amounts_count = amounts_count
        super().__init__(
            f"reserve data mismatch: {addresses_count} addresses, {amounts_count} amounts"
        )


class AccountSwitchError(GyroError):
    """Raised when the active account is changed while an operation is in flight."""
    pass


class TransactionRevertedError(GyroError):
    """Raised when a submitted transaction is mined with a failed status."""

    def __init__(self, tx_hash: str, receipt: Optional[dict] = None):
        self.tx_hash = tx_hash
        self.receipt = receipt
        super().__init__(f"transaction {tx_hash} failed (reverted)")
