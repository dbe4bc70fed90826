import logging

from admin.schemas import TransactionData
from chain.gateway import ContractGateway
from core.redis.providers import CacheService
from whitelist.usecases import whitelist_cache_key


class UpdateWhitelistUseCase:
    """
    Use case for adding or removing whitelist entries on chain.

    Cached whitelist statuses of the affected addresses are dropped once the
    transaction is confirmed.

    Parameters
    ----------
    gateway : ContractGateway
        Contract gateway
    cache_service : CacheService
        Cache service instance
    logger : logging.Logger
        Logger instance
    """

    def __init__(self, gateway: ContractGateway, cache_service: CacheService, logger: logging.Logger):
        self.gateway = gateway
        self.cache = cache_service
        self.logger = logger

    async def __call__(self, addresses: list[str], status: bool) -> TransactionData:
        """
        Execute use case.

        Parameters
        ----------
        addresses : list[str]
            Normalized addresses, in the order to submit
        status : bool
            True to whitelist, False to remove

        Returns
        -------
        TransactionData
            Confirmed transaction
        """
        if status:
            pending = await self.gateway.add_to_whitelist(addresses)
        else:
            pending = await self.gateway.remove_from_whitelist(addresses)

        await self.cache.delete(*{whitelist_cache_key(address) for address in addresses})
        self.logger.info(
            f"Whitelist {'add' if status else 'remove'} of {len(addresses)} address(es) "
            f"confirmed in {pending.transaction_hash}"
        )
        return TransactionData.from_pending(pending, addresses)


class SetSalePausedUseCase:
    """
    Use case for pausing or resuming the sale.

    Parameters
    ----------
    gateway : ContractGateway
        Contract gateway
    """

    def __init__(self, gateway: ContractGateway):
        self.gateway = gateway

    async def __call__(self, paused: bool) -> TransactionData:
        if paused:
            pending = await self.gateway.pause_sale()
        else:
            pending = await self.gateway.unpause_sale()
        return TransactionData.from_pending(pending)
