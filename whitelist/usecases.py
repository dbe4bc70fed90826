import logging

from chain.codec import format_address, parse_address
from chain.gateway import ContractGateway
from core.environment.config import Settings
from core.redis.providers import CacheService
from whitelist.schemas import WhitelistStatusData

WHITELIST_CACHE_PREFIX = "whitelist"


def whitelist_cache_key(address: str) -> str:
    return f"{WHITELIST_CACHE_PREFIX}:{address}"


class GetWhitelistStatusUseCase:
    """
    Use case for checking whitelist membership.

    Results are cached for ``whitelist_cache_ttl`` seconds and dropped by
    the admin whitelist use cases after a confirmed change.

    Parameters
    ----------
    gateway : ContractGateway
        Contract gateway
    cache_service : CacheService
        Cache service instance
    settings : Settings
        Application settings
    logger : logging.Logger
        Logger instance
    """

    def __init__(
        self,
        gateway: ContractGateway,
        cache_service: CacheService,
        settings: Settings,
        logger: logging.Logger
    ):
        self.gateway = gateway
        self.cache = cache_service
        self.settings = settings
        self.logger = logger

    async def __call__(self, address: str) -> WhitelistStatusData:
        """
        Execute use case.

        Parameters
        ----------
        address : str
            Address to check

        Returns
        -------
        WhitelistStatusData
            Whitelist status
        """
        normalized = format_address(parse_address(address))
        cache_key = whitelist_cache_key(normalized)

        cached = await self.cache.get(cache_key)
        if cached:
            self.logger.debug(f"Whitelist status cache hit for {normalized}")
            return WhitelistStatusData(**cached)

        is_whitelisted = await self.gateway.is_whitelisted(normalized)
        response = WhitelistStatusData(address=normalized, is_whitelisted=is_whitelisted)

        if self.settings.whitelist_cache_ttl > 0:
            await self.cache.set(cache_key, response.model_dump(), ttl=self.settings.whitelist_cache_ttl)

        return response
