import logging
from typing import Annotated

from dishka import FromComponent, Provider, Scope, provide

from chain.gateway import ContractGateway
from sale.usecases import GetSaleInfoUseCase, GetUserPurchasesUseCase, StreamPurchaseEventsUseCase


class SaleProvider(Provider):
    """
    Provider for sale read use cases.
    """

    component = "sale"

    @provide(scope=Scope.REQUEST)
    def get_sale_info_use_case(
        self,
        gateway: Annotated[ContractGateway, FromComponent("chain")]
    ) -> GetSaleInfoUseCase:
        return GetSaleInfoUseCase(gateway=gateway)

    @provide(scope=Scope.REQUEST)
    def get_user_purchases_use_case(
        self,
        gateway: Annotated[ContractGateway, FromComponent("chain")]
    ) -> GetUserPurchasesUseCase:
        return GetUserPurchasesUseCase(gateway=gateway)

    @provide(scope=Scope.REQUEST)
    def get_stream_purchase_events_use_case(
        self,
        gateway: Annotated[ContractGateway, FromComponent("chain")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> StreamPurchaseEventsUseCase:
        """
        Provide purchase event stream use case.

        Parameters
        ----------
        gateway : ContractGateway
            Contract gateway
        logger : logging.Logger
            Logger instance

        Returns
        -------
        StreamPurchaseEventsUseCase
            Purchase event stream use case
        """
        return StreamPurchaseEventsUseCase(gateway=gateway, logger=logger)
