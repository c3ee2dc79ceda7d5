"""Client for minting and redeeming Gyro from baskets of underlying tokens.

Provides:
- Gyro: Main entrypoint (mint, redeem, balances, estimates, reserves)
- MonetaryAmount: Fixed-point amounts across token precisions
- TransactionOrchestrator / AllowanceResolver: Approval + mint/redeem sequencing
- BalanceEstimator: Read-only queries
"""

from gyrosdk.allowances import AllowanceResolver, ApprovalRequest
from gyrosdk.client import Gyro
from gyrosdk.config import Settings, get_settings
from gyrosdk.constants import DECIMALS, GAS_LIMIT, UNLIMITED_APPROVAL
from gyrosdk.errors import (
    AccountSwitchError,
    DeploymentNotFoundError,
    GyroError,
    InvalidBasketError,
    ReserveDataError,
    TransactionRevertedError,
    UnsupportedNetworkError,
)
from gyrosdk.estimator import BalanceEstimator
from gyrosdk.monetary import MonetaryAmount
from gyrosdk.orchestrator import OperationRecord, OperationState, TransactionOrchestrator
from gyrosdk.responses import (
    MintTransactionResponse,
    RedeemTransactionResponse,
    SubmittedTransaction,
)
from gyrosdk.types import AddressRef, Reserve, TokenDescriptor, TokenWithAmount

__all__ = [
    # Client
    "Gyro",
    "Settings",
    "get_settings",
    # Amounts and types
    "MonetaryAmount",
    "TokenWithAmount",
    "AddressRef",
    "TokenDescriptor",
    "Reserve",
    # Orchestration
    "AllowanceResolver",
    "ApprovalRequest",
    "TransactionOrchestrator",
    "OperationRecord",
    "OperationState",
    "BalanceEstimator",
    # Responses
    "SubmittedTransaction",
    "MintTransactionResponse",
    "RedeemTransactionResponse",
    # Constants
    "DECIMALS",
    "GAS_LIMIT",
    "UNLIMITED_APPROVAL",
    # Errors
    "GyroError",
    "UnsupportedNetworkError",
    "DeploymentNotFoundError",
    "InvalidBasketError",
    "ReserveDataError",
    "AccountSwitchError",
    "TransactionRevertedError",
]
