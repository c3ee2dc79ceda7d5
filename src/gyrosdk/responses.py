"""Transaction handles returned by mint/redeem.

Handles represent *submitted* transactions. Nothing here blocks on
confirmation unless the caller explicitly awaits ``wait()``.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from gyrosdk.constants import TX_TIMEOUT
from gyrosdk.errors import TransactionRevertedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmittedTransaction:
    """A transaction accepted by the node, not necessarily mined."""

    tx_hash: str
    description: str = ""
    web3: Any = field(default=None, repr=False, compare=False)
    timeout: float = field(default=TX_TIMEOUT, repr=False, compare=False)

    async def wait(self, timeout: Optional[float] = None) -> dict:
        """Wait for the receipt of this transaction.

        Args:
            timeout: Maximum seconds to wait (the handle's own timeout if omitted)

        Returns:
            Transaction receipt dict

        Raises:
            TransactionRevertedError: If the transaction was mined but reverted
            RuntimeError: If the handle is not bound to a node
        """
        if self.web3 is None:
            raise RuntimeError(f"transaction {self.tx_hash} is not bound to a node")

        receipt = await self.web3.eth.wait_for_transaction_receipt(
            self.tx_hash, timeout=self.timeout if timeout is None else timeout
        )
        receipt = dict(receipt)
        if receipt.get("status") == 0:
            raise TransactionRevertedError(self.tx_hash, receipt)

        logger.debug("Transaction %s confirmed in block %s", self.tx_hash, receipt.get("blockNumber"))
        return receipt


@dataclass(frozen=True)
class TransactionResponse:
    """Main transaction plus the approvals that were submitted before it."""

    main_transaction: SubmittedTransaction
    approval_transactions: tuple[SubmittedTransaction, ...] = ()

    @property
    def tx_hash(self) -> str:
        return self.main_transaction.tx_hash

    @property
    def all_transactions(self) -> list[SubmittedTransaction]:
        """Approvals then the main transaction, in submission order."""
        return [*self.approval_transactions, self.main_transaction]

    async def wait(self, timeout: Optional[float] = None) -> dict:
        """Wait for every approval, then for the main transaction.

        Returns:
            Receipt of the main transaction
        """
        for approval in self.approval_transactions:
            await approval.wait(timeout)
        return await self.main_transaction.wait(timeout)


class MintTransactionResponse(TransactionResponse):
    """Result of a mint: one approval per under-approved input token."""
    pass


class RedeemTransactionResponse(TransactionResponse):
    """Result of a redeem: at most one approval, on the fund token."""

    @property
    def approval_transaction(self) -> Optional[SubmittedTransaction]:
        return self.approval_transactions[0] if self.approval_transactions else None
