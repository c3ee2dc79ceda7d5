"""Allowance resolution for mint and redeem baskets.

Decides which tokens need a fresh ``approve`` before the protocol can pull
them. Allowances are queried fresh on every call and never cached; a
token whose current allowance already covers the requirement never gets
an approval.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from gyrosdk.constants import UNLIMITED_APPROVAL
from gyrosdk.types import Address, Allowance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApprovalRequest:
    """An approval that must be submitted before the main call."""

    token: Address
    spender: Address
    amount: int
    current_allowance: int
    required: int


def approval_amount(required: int, approve_future: bool) -> int:
    """Amount to approve: the exact requirement or the unlimited sentinel."""
    return UNLIMITED_APPROVAL if approve_future else required


class AllowanceResolver:
    """Computes required approvals for a single owner/spender pair.

    Args:
        token_factory: Callable returning a token binding for an address;
            the binding must expose ``async allowance(owner, spender)``
    """

    def __init__(self, token_factory: Callable):
        self.token_factory = token_factory

    async def fetch_allowance(self, token: Address, owner: Address, spender: Address) -> Allowance:
        current = await self.token_factory(token).allowance(owner, spender)
        return Allowance(owner=owner, spender=spender, token=token, current=int(current))

    async def fetch_allowances(
        self,
        tokens: list[Address],
        owner: Address,
        spender: Address,
    ) -> list[Allowance]:
        """Query allowances for all tokens concurrently, in input order."""
        return list(
            await asyncio.gather(
                *(self.fetch_allowance(token, owner, spender) for token in tokens)
            )
        )

    async def resolve(
        self,
        requirements: list[tuple[Address, int]],
        owner: Address,
        spender: Address,
        approve_future: bool = True,
    ) -> list[ApprovalRequest]:
        """Determine which tokens need approval.

        Args:
            requirements: (token address, required raw amount) pairs
            owner: Account whose tokens will be spent
            spender: Contract that will pull the tokens
            approve_future: Approve the unlimited sentinel instead of the
                exact requirement

        Returns:
            Approvals to submit, in basket order (empty if all are covered)
        """
        allowances = await self.fetch_allowances(
            [token for token, _ in requirements], owner, spender
        )

        approvals = []
        for allowance, (_, required) in zip(allowances, requirements):
            request = self._decide(allowance, required, approve_future)
            if request is not None:
                approvals.append(request)

        logger.debug(
            "%d of %d token(s) need approval for spender %s",
            len(approvals), len(requirements), spender,
        )
        return approvals

    async def resolve_single(
        self,
        token: Address,
        required: int,
        owner: Address,
        spender: Address,
        approve_future: bool = True,
    ) -> Optional[ApprovalRequest]:
        """Same threshold logic as ``resolve`` with a single allowance query."""
        allowance = await self.fetch_allowance(token, owner, spender)
        return self._decide(allowance, required, approve_future)

    @staticmethod
    def _decide(
        allowance: Allowance,
        required: int,
        approve_future: bool,
    ) -> Optional[ApprovalRequest]:
        if allowance.covers(required):
            logger.debug(
                "Allowance of %s already covers %d (current %d)",
                allowance.token, required, allowance.current,
            )
            return None

        return ApprovalRequest(
            token=allowance.token,
            spender=allowance.spender,
            amount=approval_amount(required, approve_future),
            current_allowance=allowance.current,
            required=required,
        )
