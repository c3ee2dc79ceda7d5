"""Main entrypoint to the Gyro protocol.

Example:
    gyro = await Gyro.create()
    response = await gyro.mint(
        [TokenWithAmount(token=usdc, amount=MonetaryAmount.from_normalized("100", 6))],
        min_minted=MonetaryAmount.from_normalized("99"),
    )
    await response.wait()
"""

import logging
from typing import Optional, Union

from web3 import AsyncHTTPProvider, AsyncWeb3

from gyrosdk.config import Settings, get_settings
from gyrosdk.contracts import GyroFundContract, GyroLibContract, TokenFactory
from gyrosdk.errors import AccountSwitchError, GyroError
from gyrosdk.estimator import BalanceEstimator
from gyrosdk.monetary import MonetaryAmount
from gyrosdk.networks import Deployment, get_deployment
from gyrosdk.orchestrator import OperationRecord, TransactionOrchestrator
from gyrosdk.responses import MintTransactionResponse, RedeemTransactionResponse
from gyrosdk.types import Address, Reserve, TokenDescriptor, TokenRef, TokenWithAmount

logger = logging.getLogger(__name__)


class Gyro:
    """Mint, redeem and query Gyro for one active account.

    Use ``Gyro.create`` rather than the constructor: it resolves the
    deployment from the node's chain id first.
    """

    def __init__(
        self,
        web3,
        address: Address,
        deployment: Deployment,
        settings: Optional[Settings] = None,
    ):
        self.web3 = web3
        self.deployment = deployment
        self.settings = settings or get_settings()
        self._address = address

        gas_limit = self.settings.gas_limit
        tx_timeout = self.settings.tx_timeout
        self._tokens = TokenFactory(web3, address, gas_limit, tx_timeout)
        self._fund = GyroFundContract(
            web3, deployment.fund_address, address, gas_limit, tx_timeout
        )
        self._lib = GyroLibContract(
            web3, deployment.lib_address, address, gas_limit, tx_timeout
        )

        self.orchestrator = TransactionOrchestrator(
            address, self._lib, self._fund.address, self._tokens
        )
        self.estimator = BalanceEstimator(address, self._lib, self._fund, self._tokens)

    @classmethod
    async def create(
        cls,
        web3=None,
        address: Optional[Address] = None,
        settings: Optional[Settings] = None,
    ) -> "Gyro":
        """Create a client bound to the node's network.

        Args:
            web3: An ``AsyncWeb3`` instance (built from ``settings.rpc_url`` if omitted)
            address: Account to use (settings, then the node's first account)
            settings: Client settings (cached environment settings if omitted)

        Raises:
            UnsupportedNetworkError: If the node's chain is not a Gyro network
            DeploymentNotFoundError: If no addresses are configured for it
        """
        settings = settings or get_settings()
        if web3 is None:
            web3 = AsyncWeb3(AsyncHTTPProvider(settings.rpc_url))

        deployment = await get_deployment(web3, settings.load_deployments())

        if not address:
            address = settings.account or await cls._default_account(web3)

        logger.info("Connected to Gyro on %s as %s", deployment.network, address)
        return cls(web3, address, deployment, settings)

    @staticmethod
    async def _default_account(web3) -> Address:
        accounts = await web3.eth.accounts
        if not accounts:
            raise GyroError("node exposes no accounts; pass an address explicitly")
        return accounts[0]

    @property
    def address(self) -> Address:
        return self._address

    @property
    def network(self) -> str:
        return self.deployment.network

    @property
    def fund_address(self) -> Address:
        return self.estimator.fund_address

    @property
    def last_operation(self) -> Optional[OperationRecord]:
        """Progress of the latest mint/redeem, including partial failures."""
        return self.orchestrator.last_operation

    def change_account(self, address: Address) -> None:
        """Switch the account used to sign and query.

        Raises:
            AccountSwitchError: If a mint or redeem is still being submitted
        """
        if self.orchestrator.in_flight:
            raise AccountSwitchError(
                f"cannot switch to {address} while an operation is being submitted"
            )

        self._address = address
        self._tokens = self._tokens.connect(address)
        self._fund = self._fund.connect(address)
        self._lib = self._lib.connect(address)
        self.orchestrator.rebind(address, self._lib, self._tokens)
        self.estimator.rebind(address, self._lib, self._fund, self._tokens)
        logger.info("Switched active account to %s", address)

    # ======================
    # Transactions
    # ======================

    async def mint(
        self,
        inputs: list[TokenWithAmount],
        min_minted: Union[MonetaryAmount, int, None] = None,
        approve_future: Optional[bool] = None,
    ) -> MintTransactionResponse:
        """Mint at least ``min_minted`` Gyro from ``inputs``.

        ``approve_future`` defaults to the ``approve_future`` setting.
        """
        if approve_future is None:
            approve_future = self.settings.approve_future
        return await self.orchestrator.mint(inputs, min_minted, approve_future)

    async def redeem(
        self,
        outputs: list[TokenWithAmount],
        max_redeemed: Union[MonetaryAmount, int, None] = None,
        approve_future: Optional[bool] = None,
    ) -> RedeemTransactionResponse:
        """Redeem at most ``max_redeemed`` Gyro into ``outputs``."""
        if approve_future is None:
            approve_future = self.settings.approve_future
        return await self.orchestrator.redeem(outputs, max_redeemed, approve_future)

    # ======================
    # Queries
    # ======================

    async def estimate_minted(self, inputs: list[TokenWithAmount]) -> MonetaryAmount:
        return await self.estimator.estimate_minted(inputs)

    async def estimate_redeemed(self, outputs: list[TokenWithAmount]) -> MonetaryAmount:
        return await self.estimator.estimate_redeemed(outputs)

    async def balance(self, address: Optional[Address] = None) -> MonetaryAmount:
        return await self.estimator.balance(address)

    async def total_supply(self) -> MonetaryAmount:
        return await self.estimator.total_supply()

    async def token_balance(
        self,
        token: Union[TokenRef, Address],
        address: Optional[Address] = None,
    ) -> MonetaryAmount:
        return await self.estimator.token_balance(token, address)

    async def get_supported_token_addresses(self) -> list[Address]:
        return await self.estimator.get_supported_token_addresses()

    async def get_supported_tokens(self) -> list[TokenDescriptor]:
        return await self.estimator.get_supported_tokens()

    async def get_reserve_values(self) -> list[Reserve]:
        return await self.estimator.get_reserve_values()
