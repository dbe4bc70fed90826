import asyncio
import logging
from typing import Any, AsyncIterator, Awaitable, TypeVar

import aiohttp
from eth_account.signers.local import LocalAccount
from eth_utils import to_hex
from web3 import AsyncWeb3
from web3.exceptions import (
    ContractLogicError,
    ProviderConnectionError,
    TimeExhausted,
    Web3Exception,
)

from chain.abi import ContractDescriptor, ContractRole
from chain.codec import format_address, to_checksum
from chain.entities import GasPolicy, Receipt, TransactionHandle
from core.exceptions import (
    BaseCustomException,
    ChainConnectionException,
    ChainTimeoutException,
    InsufficientFundsException,
    NonceConflictException,
    RemoteExecutionException,
    SigningException,
)

T = TypeVar("T")

_NONCE_ERRORS = (
    "nonce too low",
    "nonce too high",
    "already known",
    "replacement transaction underpriced",
    "known transaction",
)


def translate_error(error: Exception, action: str) -> BaseCustomException:
    """
    Map a transport or node error onto the service exception taxonomy.

    Parameters
    ----------
    error : Exception
        Raised by web3 or the HTTP transport
    action : str
        Short description used in the message

    Returns
    -------
    BaseCustomException
        Exception to raise in its place
    """
    if isinstance(error, BaseCustomException):
        return error
    if isinstance(error, (asyncio.TimeoutError, TimeExhausted)):
        return ChainTimeoutException(f"Timed out: {action}")
    if isinstance(error, ContractLogicError):
        return RemoteExecutionException(f"Execution reverted: {action}: {error}")

    text = str(error).lower()
    if "insufficient funds" in text:
        return InsufficientFundsException(f"Insufficient funds: {action}")
    if any(marker in text for marker in _NONCE_ERRORS):
        return NonceConflictException(f"Nonce rejected: {action}: {error}")
    if isinstance(error, (ProviderConnectionError, aiohttp.ClientError, OSError)):
        return ChainConnectionException(f"Connection failed: {action}: {error}")
    return RemoteExecutionException(f"Node error: {action}: {error}")


class LogSubscription:
    """
    Live stream of log entries matching one filter.

    The node-side filter is polled every ``poll_interval`` seconds. Iterating
    yields entries in the order the node reports them, forever, until
    :meth:`cancel` is called or polling fails. The filter is uninstalled
    exactly once whichever way the stream ends. A subscription can be
    iterated only once; open a new one to resume, entries missed in between
    are not replayed.

    Parameters
    ----------
    web3 : AsyncWeb3
        Web3 client
    filter_params : dict[str, Any]
        ``eth_newFilter`` parameters
    poll_interval : float
        Seconds between polls
    timeout : float | None
        Deadline for each poll
    logger : logging.Logger
        Logger instance
    """

    def __init__(
        self,
        web3: AsyncWeb3,
        filter_params: dict[str, Any],
        poll_interval: float,
        timeout: float | None,
        logger: logging.Logger
    ):
        self.web3 = web3
        self.filter_params = filter_params
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.logger = logger
        self.filter_id: str | None = None
        self._cancelled = asyncio.Event()
        self._started = False
        self._released = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def released(self) -> bool:
        return self._released

    async def open(self) -> "LogSubscription":
        """Install the node-side filter."""
        try:
            log_filter = await asyncio.wait_for(self.web3.eth.filter(self.filter_params), self.timeout)
        except Exception as e:
            raise translate_error(e, "install log filter") from e
        self.filter_id = log_filter.filter_id
        self.logger.info(f"Log subscription {self.filter_id} opened")
        return self

    def __aiter__(self) -> AsyncIterator[Any]:
        if self._started:
            raise RuntimeError("Log subscription is not restartable")
        self._started = True
        return self._entries()

    async def _entries(self) -> AsyncIterator[Any]:
        try:
            while not self._cancelled.is_set():
                try:
                    entries = await asyncio.wait_for(
                        self.web3.eth.get_filter_changes(self.filter_id), self.timeout
                    )
                except Exception as e:
                    raise translate_error(e, "poll log filter") from e

                for entry in entries:
                    if self._cancelled.is_set():
                        return
                    yield entry

                try:
                    await asyncio.wait_for(self._cancelled.wait(), self.poll_interval)
                except asyncio.TimeoutError:
                    pass
        finally:
            await self.release()

    async def cancel(self) -> None:
        """Stop the stream and release the filter. Safe to call repeatedly."""
        self._cancelled.set()
        await self.release()

    async def release(self) -> None:
        if self._released:
            return
        self._released = True
        if self.filter_id is None:
            return
        try:
            await asyncio.wait_for(self.web3.eth.uninstall_filter(self.filter_id), self.timeout)
            self.logger.info(f"Log subscription {self.filter_id} released")
        except Exception as e:
            # the node drops idle filters on its own
            self.logger.warning(f"Failed to uninstall filter {self.filter_id}: {e}")


class ChainClient:
    """
    Thin adapter over ``AsyncWeb3`` for contract reads, writes and log
    subscriptions.

    The adapter never retries: reads are safe for the caller to repeat,
    writes are surfaced as-is so the caller can decide.

    Parameters
    ----------
    web3 : AsyncWeb3
        Web3 client
    descriptor : ContractDescriptor
        Contract interface used to encode calldata
    logger : logging.Logger
        Logger instance
    poll_interval : float
        Seconds between receipt and log polls
    """

    def __init__(
        self,
        web3: AsyncWeb3,
        descriptor: ContractDescriptor,
        logger: logging.Logger,
        poll_interval: float = 2.0
    ):
        self.web3 = web3
        self.descriptor = descriptor
        self.logger = logger
        self.poll_interval = poll_interval

    async def _guard(self, awaitable: Awaitable[T], timeout: float | None, action: str) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout)
        except Exception as e:
            raise translate_error(e, action) from e

    async def is_connected(self) -> bool:
        try:
            return bool(await asyncio.wait_for(self.web3.is_connected(), 5))
        except Exception as e:
            self.logger.warning(f"Node connectivity check failed: {e}")
            return False

    async def chain_id(self, timeout: float | None = None) -> int:
        return int(await self._guard(self.web3.eth.chain_id, timeout, "get chain id"))

    async def suggest_gas_price(self, timeout: float | None = None) -> int:
        return int(await self._guard(self.web3.eth.gas_price, timeout, "get gas price"))

    async def call(
        self,
        contract_address: bytes,
        role: ContractRole,
        method: str,
        args: tuple = (),
        timeout: float | None = None
    ) -> bytes:
        """
        Execute a read-only contract call.

        Parameters
        ----------
        contract_address : bytes
            Target contract
        role : ContractRole
            Contract role in the descriptor
        method : str
            Method name
        args : tuple
            Method arguments
        timeout : float | None
            Deadline in seconds

        Returns
        -------
        bytes
            Raw return data

        Raises
        ------
        ChainConnectionException
            If the node cannot be reached
        RemoteExecutionException
            If the node reports an execution error
        ChainTimeoutException
            If the deadline expires
        """
        data = self.descriptor.encode_call(role, method, args)
        result = await self._guard(
            self.web3.eth.call({"to": to_checksum(contract_address), "data": to_hex(data)}),
            timeout,
            f"call {method}"
        )
        return bytes(result)

    async def submit(
        self,
        account: LocalAccount,
        contract_address: bytes,
        role: ContractRole,
        method: str,
        args: tuple,
        gas_policy: GasPolicy,
        chain_id: int,
        timeout: float | None = None
    ) -> TransactionHandle:
        """
        Sign and broadcast a state-changing call.

        The nonce is the node's pending transaction count for the signer.
        Concurrent submissions under the same key from several processes
        are not coordinated.

        Parameters
        ----------
        account : LocalAccount
            Signing account
        contract_address : bytes
            Target contract
        role : ContractRole
            Contract role in the descriptor
        method : str
            Method name
        args : tuple
            Method arguments
        gas_policy : GasPolicy
            Gas limit and price; ``gas_price`` must be resolved
        chain_id : int
            Network chain id for replay protection
        timeout : float | None
            Deadline in seconds for each node request

        Returns
        -------
        TransactionHandle
            Handle of the broadcast transaction

        Raises
        ------
        SigningException
            If the transaction cannot be signed
        InsufficientFundsException
            If the signer cannot pay for gas
        NonceConflictException
            If the node rejects the nonce
        ChainConnectionException
            If the node cannot be reached
        """
        data = self.descriptor.encode_call(role, method, args)
        nonce = await self._guard(
            self.web3.eth.get_transaction_count(account.address, "pending"),
            timeout,
            "get nonce"
        )

        tx = {
            "to": to_checksum(contract_address),
            "data": to_hex(data),
            "value": 0,
            "nonce": nonce,
            "gas": gas_policy.gas_limit,
            "gasPrice": gas_policy.gas_price,
            "chainId": chain_id,
        }
        try:
            signed = account.sign_transaction(tx)
        except (TypeError, ValueError) as e:
            raise SigningException(f"Failed to sign {method}: {e}") from e

        tx_hash = await self._guard(
            self.web3.eth.send_raw_transaction(signed.raw_transaction),
            timeout,
            f"send {method}"
        )
        handle = TransactionHandle(
            transaction_hash=to_hex(tx_hash),
            contract_address=format_address(contract_address),
            method=method,
            args=tuple(args)
        )
        self.logger.info(f"Submitted {method} to {handle.contract_address}: {handle.transaction_hash} (nonce {nonce})")
        return handle

    async def wait_for_confirmation(self, handle: TransactionHandle, timeout: float) -> Receipt:
        """
        Wait until the transaction is mined.

        A reverted transaction resolves to a receipt with ``success=False``.

        Raises
        ------
        ChainTimeoutException
            If no receipt arrives before the deadline
        """
        try:
            receipt = await self.web3.eth.wait_for_transaction_receipt(
                handle.transaction_hash,
                timeout=timeout,
                poll_latency=self.poll_interval
            )
        except (Web3Exception, aiohttp.ClientError, OSError, asyncio.TimeoutError) as e:
            raise translate_error(e, f"wait for {handle.transaction_hash}") from e

        return Receipt(
            transaction_hash=handle.transaction_hash,
            success=receipt["status"] == 1,
            block_number=int(receipt["blockNumber"]),
            gas_used=int(receipt.get("gasUsed", 0))
        )

    async def subscribe_logs(
        self,
        filter_params: dict[str, Any],
        timeout: float | None = None
    ) -> LogSubscription:
        """
        Open a log subscription for the given filter.

        Parameters
        ----------
        filter_params : dict[str, Any]
            Filter with ``address`` and ``topics``
        timeout : float | None
            Deadline for each node request

        Returns
        -------
        LogSubscription
            Opened subscription
        """
        subscription = LogSubscription(
            web3=self.web3,
            filter_params=filter_params,
            poll_interval=self.poll_interval,
            timeout=timeout,
            logger=self.logger
        )
        return await subscription.open()
