import asyncio
import logging

from eth_account.signers.local import LocalAccount
from eth_utils import to_hex

from chain.abi import ContractDescriptor, ContractRole
from chain.client import ChainClient
from chain.codec import format_address, parse_address, to_checksum
from chain.entities import (
    GasPolicy,
    PendingTransaction,
    SaleSnapshotEntity,
    UserPurchaseEntity,
)
from chain.events import PurchaseEventWatcher
from core.exceptions import (
    ContractNotConfiguredException,
    InvalidFormatException,
    SigningKeyRequiredException,
    TransactionRevertedException,
)

PURCHASE_EVENT = "TokenPurchase"


class ContractGateway:
    """
    Typed operations on the sale and token contracts.

    The gateway holds no state of its own: every read goes to the node and
    every write is signed, submitted and awaited until its receipt is known.
    A missing contract address or signing key fails before any network
    request is made.

    Parameters
    ----------
    client : ChainClient
        Chain client adapter
    descriptor : ContractDescriptor
        Contract interface descriptor
    logger : logging.Logger
        Logger instance
    sale_address : bytes | None
        Sale contract; sale operations are unavailable when unset
    token_address : bytes | None
        Token contract; whitelist operations are unavailable when unset
    account : LocalAccount | None
        Signing account; read-only mode when unset
    gas_policy : GasPolicy | None
        Gas limit and optional fixed gas price
    call_timeout : float
        Deadline for each node request, in seconds
    confirmation_timeout : float
        Deadline for a transaction to be mined, in seconds
    """

    def __init__(
        self,
        client: ChainClient,
        descriptor: ContractDescriptor,
        logger: logging.Logger,
        sale_address: bytes | None = None,
        token_address: bytes | None = None,
        account: LocalAccount | None = None,
        gas_policy: GasPolicy | None = None,
        call_timeout: float = 10.0,
        confirmation_timeout: float = 30.0
    ):
        self.client = client
        self.descriptor = descriptor
        self.logger = logger
        self.sale_address = sale_address
        self.token_address = token_address
        self.account = account
        self.gas_policy = gas_policy or GasPolicy()
        self.call_timeout = call_timeout
        self.confirmation_timeout = confirmation_timeout

    @property
    def read_only(self) -> bool:
        return self.account is None

    def _contract(self, role: ContractRole) -> bytes:
        address = self.sale_address if role is ContractRole.SALE else self.token_address
        if address is None:
            raise ContractNotConfiguredException(f"{role.value} contract address not set")
        return address

    def _signer(self) -> LocalAccount:
        if self.account is None:
            raise SigningKeyRequiredException("Private key not set, running in read-only mode")
        return self.account

    async def _read(
        self,
        role: ContractRole,
        method: str,
        args: tuple = (),
        timeout: float | None = None
    ) -> tuple:
        address = self._contract(role)
        raw = await self.client.call(address, role, method, args, timeout or self.call_timeout)
        return self.descriptor.decode_result(role, method, raw)

    async def get_sale_info(self, timeout: float | None = None) -> SaleSnapshotEntity:
        """
        Read sale configuration and counters.

        Four independent reads are issued together; if any fails, the whole
        call fails. The reads may be answered from different blocks.

        Parameters
        ----------
        timeout : float | None
            Deadline per read, defaults to ``call_timeout``

        Returns
        -------
        SaleSnapshotEntity
            Fresh snapshot
        """
        self._contract(ContractRole.SALE)
        config, total_sold, total_raised, is_active = await asyncio.gather(
            self._read(ContractRole.SALE, "saleConfig", timeout=timeout),
            self._read(ContractRole.SALE, "totalSold", timeout=timeout),
            self._read(ContractRole.SALE, "totalEthRaised", timeout=timeout),
            self._read(ContractRole.SALE, "isSaleActive", timeout=timeout),
        )
        return SaleSnapshotEntity(
            token_price=config[0],
            min_purchase=config[1],
            max_purchase=config[2],
            max_supply=config[3],
            start_time=config[4],
            end_time=config[5],
            whitelist_required=config[6],
            total_sold=total_sold[0],
            total_raised=total_raised[0],
            is_active=is_active[0]
        )

    async def get_user_purchase_info(self, address: str, timeout: float | None = None) -> UserPurchaseEntity:
        """
        Read purchase detail and cumulative total for a buyer.

        Parameters
        ----------
        address : str
            Buyer address
        timeout : float | None
            Deadline per read

        Returns
        -------
        UserPurchaseEntity
            Purchase record
        """
        user = parse_address(address)
        self._contract(ContractRole.SALE)
        purchase, total = await asyncio.gather(
            self._read(ContractRole.SALE, "getPurchaseInfo", (user,), timeout),
            self._read(ContractRole.SALE, "totalPurchased", (user,), timeout),
        )
        return UserPurchaseEntity(
            address=format_address(user),
            amount=purchase[0],
            paid_amount=purchase[1],
            timestamp=purchase[2],
            claimed=purchase[3],
            total_purchased=total[0]
        )

    async def is_whitelisted(self, address: str, timeout: float | None = None) -> bool:
        user = parse_address(address)
        result = await self._read(ContractRole.TOKEN, "whitelist", (user,), timeout)
        return bool(result[0])

    async def add_to_whitelist(self, addresses: list[str]) -> PendingTransaction:
        """
        Whitelist one or more addresses on the token contract.

        One address goes through ``updateWhitelist``; several go through
        ``updateWhitelistBatch`` in the order given, duplicates included.

        Parameters
        ----------
        addresses : list[str]
            Addresses to whitelist

        Returns
        -------
        PendingTransaction
            Confirmed transaction
        """
        return await self._update_whitelist(addresses, True)

    async def remove_from_whitelist(self, addresses: list[str]) -> PendingTransaction:
        """Remove addresses from the whitelist; same routing as :meth:`add_to_whitelist`."""
        return await self._update_whitelist(addresses, False)

    async def _update_whitelist(self, addresses: list[str], status: bool) -> PendingTransaction:
        self._signer()
        self._contract(ContractRole.TOKEN)
        if not addresses:
            raise InvalidFormatException("At least one address is required")
        parsed = [parse_address(address) for address in addresses]

        if len(parsed) == 1:
            return await self._transact(ContractRole.TOKEN, "updateWhitelist", (parsed[0], status))
        return await self._transact(ContractRole.TOKEN, "updateWhitelistBatch", (parsed, status))

    async def pause_sale(self) -> PendingTransaction:
        return await self._transact(ContractRole.SALE, "pause")

    async def unpause_sale(self) -> PendingTransaction:
        return await self._transact(ContractRole.SALE, "unpause")

    async def _transact(self, role: ContractRole, method: str, args: tuple = ()) -> PendingTransaction:
        """
        Run the full write lifecycle for one call.

        Chain id, gas price, submission, confirmation, receipt check. Nothing
        is retried.

        Raises
        ------
        TransactionRevertedException
            If the receipt reports failure
        """
        account = self._signer()
        address = self._contract(role)
        self.descriptor.method(role, method)

        chain_id = await self.client.chain_id(self.call_timeout)
        gas_price = self.gas_policy.gas_price
        if gas_price is None:
            gas_price = await self.client.suggest_gas_price(self.call_timeout)
        policy = GasPolicy(gas_limit=self.gas_policy.gas_limit, gas_price=gas_price)

        handle = await self.client.submit(
            account, address, role, method, args, policy, chain_id, self.call_timeout
        )
        pending = PendingTransaction(handle=handle)
        pending.receipt = await self.client.wait_for_confirmation(handle, self.confirmation_timeout)

        if not pending.receipt.success:
            self.logger.error(
                f"Transaction {handle.transaction_hash} ({method}) reverted in block {pending.receipt.block_number}"
            )
            raise TransactionRevertedException(
                transaction_hash=handle.transaction_hash,
                block_number=pending.receipt.block_number
            )

        self.logger.info(
            f"Transaction {handle.transaction_hash} completed successfully (block {pending.receipt.block_number})"
        )
        return pending

    async def watch_purchase_events(self, max_pending: int = 0) -> PurchaseEventWatcher:
        """
        Subscribe to purchase events from the sale contract.

        The caller owns the returned watcher and must cancel it. Polling
        starts when the watcher is first iterated.

        Parameters
        ----------
        max_pending : int
            Bound on undelivered events, 0 for unbounded

        Returns
        -------
        PurchaseEventWatcher
            Subscribed watcher
        """
        sale = self._contract(ContractRole.SALE)
        event_spec = self.descriptor.event(ContractRole.SALE, PURCHASE_EVENT)
        subscription = await self.client.subscribe_logs(
            {"address": to_checksum(sale), "topics": [to_hex(event_spec.topic)]},
            timeout=self.call_timeout
        )
        return PurchaseEventWatcher(subscription, event_spec, self.logger, max_pending)
