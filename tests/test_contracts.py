"""Tests for web3 contract bindings and transaction handles."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from web3 import Web3

from gyrosdk.constants import GAS_LIMIT
from gyrosdk.contracts import ERC20Contract, GyroLibContract, TokenFactory
from gyrosdk.errors import TransactionRevertedError
from gyrosdk.responses import (
    MintTransactionResponse,
    RedeemTransactionResponse,
    SubmittedTransaction,
)

from tests.conftest import DAI, LIB_ADDRESS, OTHER_ACCOUNT, OWNER, USDC

TX_HASH = b"\x12" * 32


def make_web3():
    """web3 double whose contract functions are mocks."""
    web3 = MagicMock()
    contract = MagicMock()
    web3.eth.contract.return_value = contract
    return web3, contract


class TestERC20Contract:
    """Tests for ERC20Contract."""

    def test_addresses_are_checksummed(self):
        """Test bindings checksum contract and account addresses."""
        web3, _ = make_web3()

        token = ERC20Contract(web3, USDC, OWNER)

        assert token.address == Web3.to_checksum_address(USDC)
        assert token.account == Web3.to_checksum_address(OWNER)
        assert token.gas_limit == GAS_LIMIT

    @pytest.mark.asyncio
    async def test_allowance(self):
        """Test allowance calls the view function."""
        web3, contract = make_web3()
        contract.functions.allowance.return_value.call = AsyncMock(return_value=123)

        token = ERC20Contract(web3, USDC, OWNER)
        allowance = await token.allowance(OWNER, LIB_ADDRESS)

        assert allowance == 123
        contract.functions.allowance.assert_called_once_with(
            Web3.to_checksum_address(OWNER), Web3.to_checksum_address(LIB_ADDRESS)
        )

    @pytest.mark.asyncio
    async def test_approve_sends_with_gas_ceiling(self):
        """Test approve is sent from the bound account with the gas ceiling."""
        web3, contract = make_web3()
        transact = AsyncMock(return_value=TX_HASH)
        contract.functions.approve.return_value.transact = transact

        token = ERC20Contract(web3, USDC, OWNER, gas_limit=1_000)
        tx = await token.approve(LIB_ADDRESS, 10**50)

        assert tx.tx_hash == "0x" + "12" * 32
        assert tx.web3 is web3
        transact.assert_awaited_once_with(
            {"from": Web3.to_checksum_address(OWNER), "gas": 1_000}
        )
        contract.functions.approve.assert_called_once_with(
            Web3.to_checksum_address(LIB_ADDRESS), 10**50
        )

    @pytest.mark.asyncio
    async def test_remote_error_propagates(self):
        """Test binding errors are not wrapped."""
        web3, contract = make_web3()
        contract.functions.approve.return_value.transact = AsyncMock(
            side_effect=ValueError("execution reverted")
        )

        with pytest.raises(ValueError, match="execution reverted"):
            await ERC20Contract(web3, USDC, OWNER).approve(LIB_ADDRESS, 1)

    def test_connect_rebinds_account(self):
        """Test connect keeps the contract and changes the account."""
        web3, _ = make_web3()
        token = ERC20Contract(web3, USDC, OWNER)

        other = token.connect(OTHER_ACCOUNT)

        assert isinstance(other, ERC20Contract)
        assert other.address == token.address
        assert other.account == Web3.to_checksum_address(OTHER_ACCOUNT)

    def test_token_factory(self):
        """Test the factory binds tokens to its account."""
        web3, _ = make_web3()
        factory = TokenFactory(web3, OWNER)

        token = factory(DAI)
        rebound = factory.connect(OTHER_ACCOUNT)(DAI)

        assert token.account == Web3.to_checksum_address(OWNER)
        assert rebound.account == Web3.to_checksum_address(OTHER_ACCOUNT)


class TestGyroLibContract:
    """Tests for GyroLibContract."""

    @pytest.mark.asyncio
    async def test_mint(self):
        """Test mint passes the basket, the bound and the gas ceiling."""
        web3, contract = make_web3()
        transact = AsyncMock(return_value=TX_HASH)
        contract.functions.mintFromUnderlyingTokens.return_value.transact = transact

        lib = GyroLibContract(web3, LIB_ADDRESS, OWNER)
        await lib.mint_from_underlying_tokens([USDC, DAI], [1, 2], 3)

        contract.functions.mintFromUnderlyingTokens.assert_called_once_with(
            [Web3.to_checksum_address(USDC), Web3.to_checksum_address(DAI)], [1, 2], 3
        )
        transact.assert_awaited_once_with({"from": Web3.to_checksum_address(OWNER), "gas": 3_000_000})

    @pytest.mark.asyncio
    async def test_redeem(self):
        """Test redeem passes the maximum burnt."""
        web3, contract = make_web3()
        contract.functions.redeemToUnderlyingTokens.return_value.transact = AsyncMock(
            return_value=TX_HASH
        )

        lib = GyroLibContract(web3, LIB_ADDRESS, OWNER)
        tx = await lib.redeem_to_underlying_tokens([USDC], [5], 9)

        assert tx.description == "redeem to 1 token(s)"
        contract.functions.redeemToUnderlyingTokens.assert_called_once_with(
            [Web3.to_checksum_address(USDC)], [5], 9
        )

    @pytest.mark.asyncio
    async def test_reserve_values(self):
        """Test the reserve tuple is unpacked into lists."""
        web3, contract = make_web3()
        contract.functions.getReserveValues.return_value.call = AsyncMock(
            return_value=(0, (USDC,), (10,))
        )

        lib = GyroLibContract(web3, LIB_ADDRESS, OWNER)

        assert await lib.get_reserve_values() == (0, [USDC], [10])


class TestSubmittedTransaction:
    """Tests for transaction handles."""

    @pytest.mark.asyncio
    async def test_wait_returns_receipt(self):
        """Test wait returns the mined receipt."""
        web3 = MagicMock()
        web3.eth.wait_for_transaction_receipt = AsyncMock(
            return_value={"status": 1, "blockNumber": 10}
        )
        tx = SubmittedTransaction(tx_hash="0xabc", web3=web3)

        receipt = await tx.wait(timeout=5)

        assert receipt["blockNumber"] == 10
        web3.eth.wait_for_transaction_receipt.assert_awaited_once_with("0xabc", timeout=5)

    @pytest.mark.asyncio
    async def test_wait_uses_handle_timeout(self):
        """Test wait falls back to the timeout the handle was submitted with."""
        web3 = MagicMock()
        web3.eth.wait_for_transaction_receipt = AsyncMock(return_value={"status": 1})
        tx = SubmittedTransaction(tx_hash="0xabc", web3=web3, timeout=7.5)

        await tx.wait()

        web3.eth.wait_for_transaction_receipt.assert_awaited_once_with("0xabc", timeout=7.5)

    @pytest.mark.asyncio
    async def test_binding_timeout_reaches_wait(self):
        """Test the binding's receipt timeout is carried by submitted transactions."""
        web3, contract = make_web3()
        contract.functions.approve.return_value.transact = AsyncMock(return_value=TX_HASH)
        web3.eth.wait_for_transaction_receipt = AsyncMock(return_value={"status": 1})

        factory = TokenFactory(web3, OWNER, tx_timeout=30.0).connect(OTHER_ACCOUNT)
        tx = await factory(USDC).approve(LIB_ADDRESS, 1)
        await tx.wait()

        assert tx.timeout == 30.0
        web3.eth.wait_for_transaction_receipt.assert_awaited_once_with(tx.tx_hash, timeout=30.0)

    @pytest.mark.asyncio
    async def test_wait_raises_on_revert(self):
        """Test a mined but failed transaction raises."""
        web3 = MagicMock()
        web3.eth.wait_for_transaction_receipt = AsyncMock(return_value={"status": 0})
        tx = SubmittedTransaction(tx_hash="0xdead", web3=web3)

        with pytest.raises(TransactionRevertedError) as exc_info:
            await tx.wait()

        assert exc_info.value.tx_hash == "0xdead"

    @pytest.mark.asyncio
    async def test_wait_requires_node(self):
        """Test unbound handles cannot wait."""
        with pytest.raises(RuntimeError):
            await SubmittedTransaction(tx_hash="0x1").wait()

    @pytest.mark.asyncio
    async def test_response_waits_approvals_first(self):
        """Test composite responses wait in submission order."""
        order = []
        web3 = MagicMock()

        async def receipt(tx_hash, timeout):
            order.append(tx_hash)
            return {"status": 1}

        web3.eth.wait_for_transaction_receipt = receipt
        response = MintTransactionResponse(
            main_transaction=SubmittedTransaction("0xmain", web3=web3),
            approval_transactions=(
                SubmittedTransaction("0xa1", web3=web3),
                SubmittedTransaction("0xa2", web3=web3),
            ),
        )

        await response.wait()

        assert order == ["0xa1", "0xa2", "0xmain"]
        assert response.tx_hash == "0xmain"

    def test_redeem_response_single_approval(self):
        """Test the redeem response exposes its optional approval."""
        main = SubmittedTransaction("0xmain")
        approval = SubmittedTransaction("0xa")

        assert RedeemTransactionResponse(main).approval_transaction is None
        assert RedeemTransactionResponse(main, (approval,)).approval_transaction == approval
