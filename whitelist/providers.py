import logging
from typing import Annotated

from dishka import FromComponent, Provider, Scope, provide

from chain.gateway import ContractGateway
from core.environment.config import Settings
from core.redis.providers import CacheService
from whitelist.usecases import GetWhitelistStatusUseCase


class WhitelistProvider(Provider):
    """
    Provider for public whitelist use cases.
    """

    component = "whitelist"

    @provide(scope=Scope.REQUEST)
    def get_whitelist_status_use_case(
        self,
        gateway: Annotated[ContractGateway, FromComponent("chain")],
        cache_service: Annotated[CacheService, FromComponent("cache")],
        settings: Annotated[Settings, FromComponent("environment")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> GetWhitelistStatusUseCase:
        """
        Provide whitelist status use case.

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

        Returns
        -------
        GetWhitelistStatusUseCase
            Whitelist status use case
        """
        return GetWhitelistStatusUseCase(
            gateway=gateway,
            cache_service=cache_service,
            settings=settings,
            logger=logger
        )
