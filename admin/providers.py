import logging
from typing import Annotated

from dishka import FromComponent, Provider, Scope, provide

from admin.usecases import SetSalePausedUseCase, UpdateWhitelistUseCase
from chain.gateway import ContractGateway
from core.redis.providers import CacheService


class AdminProvider(Provider):
    """
    Provider for admin use cases.
    """

    component = "admin"

    @provide(scope=Scope.REQUEST)
    def get_update_whitelist_use_case(
        self,
        gateway: Annotated[ContractGateway, FromComponent("chain")],
        cache_service: Annotated[CacheService, FromComponent("cache")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> UpdateWhitelistUseCase:
        """
        Provide whitelist update use case.

        Parameters
        ----------
        gateway : ContractGateway
            Contract gateway
        cache_service : CacheService
            Cache service instance
        logger : logging.Logger
            Logger instance

        Returns
        -------
        UpdateWhitelistUseCase
            Whitelist update use case
        """
        return UpdateWhitelistUseCase(
            gateway=gateway,
            cache_service=cache_service,
            logger=logger
        )

    @provide(scope=Scope.REQUEST)
    def get_set_sale_paused_use_case(
        self,
        gateway: Annotated[ContractGateway, FromComponent("chain")]
    ) -> SetSalePausedUseCase:
        return SetSalePausedUseCase(gateway=gateway)
