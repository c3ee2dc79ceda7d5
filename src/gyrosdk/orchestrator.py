"""Mint/redeem orchestration.

An orchestrated operation submits every required approval, one at a time,
and only then submits the mint or redeem call:

    PENDING -> APPROVALS_SUBMITTED -> MAIN_SUBMITTED -> COMPLETED

Approvals are never sent concurrently: the signer assigns nonces in
submission order and the main call depends on the allowances they set.
"Completed" means submitted, not mined; callers await confirmation on the
returned response.

Any failure aborts the sequence where it happened and is re-raised as-is.
Transactions submitted before the failure stay submitted; they are kept on
``last_operation`` so the caller can see what already went out.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Union

from gyrosdk.allowances import AllowanceResolver, ApprovalRequest
from gyrosdk.constants import DECIMALS
from gyrosdk.errors import InvalidBasketError
from gyrosdk.monetary import MonetaryAmount
from gyrosdk.responses import (
    MintTransactionResponse,
    RedeemTransactionResponse,
    SubmittedTransaction,
)
from gyrosdk.types import Address, TokenWithAmount, split_basket

logger = logging.getLogger(__name__)


class OperationKind(str, Enum):
    MINT = "mint"
    REDEEM = "redeem"


class OperationState(str, Enum):
    """Lifecycle of one orchestrated operation."""
    PENDING = "pending"
    APPROVALS_SUBMITTED = "approvals_submitted"
    MAIN_SUBMITTED = "main_submitted"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class OperationRecord:
    """Progress of one mint or redeem, including partial results on failure."""

    kind: OperationKind
    state: OperationState = OperationState.PENDING
    approval_transactions: list[SubmittedTransaction] = field(default_factory=list)
    main_transaction: Optional[SubmittedTransaction] = None
    error: Optional[BaseException] = None

    @property
    def submitted(self) -> list[SubmittedTransaction]:
        """Everything that reached the node, in submission order."""
        txs = list(self.approval_transactions)
        if self.main_transaction is not None:
            txs.append(self.main_transaction)
        return txs


class TransactionOrchestrator:
    """Runs approval + mint/redeem sequences for one account.

    Args:
        account: Owner of the tokens and sender of every transaction
        lib: GyroLib binding (spender of every approval)
        fund_address: Address of the Gyro fund token
        token_factory: Callable returning an ERC-20 binding for an address
    """

    def __init__(
        self,
        account: Address,
        lib,
        fund_address: Address,
        token_factory: Callable,
    ):
        self.account = account
        self.lib = lib
        self.fund_address = fund_address
        self.token_factory = token_factory
        self.resolver = AllowanceResolver(token_factory)
        self.last_operation: Optional[OperationRecord] = None
        self._in_flight = 0

    @property
    def in_flight(self) -> bool:
        """Whether an orchestrated operation is currently running."""
        return self._in_flight > 0

    def rebind(self, account: Address, lib, token_factory: Callable) -> None:
        """Point the orchestrator at another signer's bindings."""
        self.account = account
        self.lib = lib
        self.token_factory = token_factory
        self.resolver = AllowanceResolver(token_factory)

    async def mint(
        self,
        inputs: list[TokenWithAmount],
        min_minted: Union[MonetaryAmount, int, None] = None,
        approve_future: bool = True,
    ) -> MintTransactionResponse:
        """Mint at least ``min_minted`` Gyro from ``inputs``.

        Args:
            inputs: Basket of underlying tokens to deposit
            min_minted: Minimum Gyro to mint (slippage guard, default 0)
            approve_future: Approve an unlimited amount for under-approved tokens

        Returns:
            MintTransactionResponse with the approvals and the mint transaction
        """
        tokens, amounts = self._split(inputs)
        min_minted = self._bound(min_minted)
        record = self._begin(OperationKind.MINT)

        try:
            approvals = await self.resolver.resolve(
                list(zip(tokens, amounts)), self.account, self.lib.address, approve_future
            )
            await self._submit_approvals(record, approvals)

            record.main_transaction = await self.lib.mint_from_underlying_tokens(
                tokens, amounts, min_minted
            )
            record.state = OperationState.MAIN_SUBMITTED
        except Exception as e:
            self._fail(record, e)
            raise
        finally:
            self._in_flight -= 1

        record.state = OperationState.COMPLETED
        return MintTransactionResponse(
            main_transaction=record.main_transaction,
            approval_transactions=tuple(record.approval_transactions),
        )

    async def redeem(
        self,
        outputs: list[TokenWithAmount],
        max_redeemed: Union[MonetaryAmount, int, None] = None,
        approve_future: bool = True,
    ) -> RedeemTransactionResponse:
        """Redeem at most ``max_redeemed`` Gyro into ``outputs``.

        Only the Gyro fund token is pulled by the library, so the approval
        check looks at the fund allowance alone, whatever the output tokens.

        Args:
            outputs: Basket of underlying tokens to receive
            max_redeemed: Maximum Gyro to burn (slippage guard, default 0)
            approve_future: Approve an unlimited amount of the fund token

        Returns:
            RedeemTransactionResponse with the optional approval and the redeem transaction
        """
        tokens, amounts = self._split(outputs)
        max_redeemed = self._bound(max_redeemed)
        record = self._begin(OperationKind.REDEEM)

        try:
            approval = await self.resolver.resolve_single(
                self.fund_address, max_redeemed, self.account, self.lib.address, approve_future
            )
            await self._submit_approvals(record, [approval] if approval else [])

            record.main_transaction = await self.lib.redeem_to_underlying_tokens(
                tokens, amounts, max_redeemed
            )
            record.state = OperationState.MAIN_SUBMITTED
        except Exception as e:
            self._fail(record, e)
            raise
        finally:
            self._in_flight -= 1

        record.state = OperationState.COMPLETED
        return RedeemTransactionResponse(
            main_transaction=record.main_transaction,
            approval_transactions=tuple(record.approval_transactions),
        )

    async def _submit_approvals(
        self,
        record: OperationRecord,
        approvals: list[ApprovalRequest],
    ) -> None:
        # Strictly sequential: each approval is acknowledged before the next
        for request in approvals:
            logger.info(
                "Approving %d of %s for %s (current allowance %d)",
                request.amount, request.token, request.spender, request.current_allowance,
            )
            tx = await self.token_factory(request.token).approve(request.spender, request.amount)
            record.approval_transactions.append(tx)
        record.state = OperationState.APPROVALS_SUBMITTED

    def _begin(self, kind: OperationKind) -> OperationRecord:
        record = OperationRecord(kind=kind)
        self.last_operation = record
        self._in_flight += 1
        return record

    @staticmethod
    def _fail(record: OperationRecord, error: Exception) -> None:
        failed_in = record.state
        record.state = OperationState.FAILED
        record.error = error
        logger.warning(
            "%s aborted after %s with %d transaction(s) already submitted: %s: %s",
            record.kind.value, failed_in.value, len(record.submitted),
            type(error).__name__, error,
        )

    @staticmethod
    def _split(basket: list[TokenWithAmount]) -> tuple[list[Address], list[int]]:
        if not basket:
            raise InvalidBasketError("basket must contain at least one token")
        return split_basket(basket)

    @staticmethod
    def _bound(bound: Union[MonetaryAmount, int, None]) -> int:
        # Gyro bounds are fund token amounts; bare ints are already raw
        if bound is None:
            return 0
        if isinstance(bound, MonetaryAmount):
            return bound.rescale(DECIMALS).value
        return int(bound)
