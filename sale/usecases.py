import logging
from typing import AsyncIterator

from chain.events import PurchaseEventWatcher
from chain.gateway import ContractGateway
from sale.schemas import PurchaseEventResponse, SaleInfoResponse, UserPurchaseResponse


class GetSaleInfoUseCase:
    """
    Use case for reading the current sale snapshot.

    Never cached: every request reads the contract.

    Parameters
    ----------
    gateway : ContractGateway
        Contract gateway
    """

    def __init__(self, gateway: ContractGateway):
        self.gateway = gateway

    async def __call__(self) -> SaleInfoResponse:
        snapshot = await self.gateway.get_sale_info()
        return SaleInfoResponse.from_entity(snapshot)


class GetUserPurchasesUseCase:
    """
    Use case for reading one buyer's purchases.

    Parameters
    ----------
    gateway : ContractGateway
        Contract gateway
    """

    def __init__(self, gateway: ContractGateway):
        self.gateway = gateway

    async def __call__(self, address: str) -> UserPurchaseResponse:
        """
        Execute use case.

        Parameters
        ----------
        address : str
            Buyer address

        Returns
        -------
        UserPurchaseResponse
            Purchase record
        """
        purchase = await self.gateway.get_user_purchase_info(address)
        return UserPurchaseResponse.from_entity(purchase)


class StreamPurchaseEventsUseCase:
    """
    Use case for streaming purchase events as server-sent events.

    The subscription is opened eagerly so configuration and node errors
    surface before the response starts. Polling begins with the first chunk
    requested; closing the iterator (client disconnect included) cancels the
    watcher.

    Parameters
    ----------
    gateway : ContractGateway
        Contract gateway
    logger : logging.Logger
        Logger instance
    """

    def __init__(self, gateway: ContractGateway, logger: logging.Logger):
        self.gateway = gateway
        self.logger = logger

    async def __call__(self) -> AsyncIterator[str]:
        """
        Open the subscription and return the event-stream body.

        Returns
        -------
        AsyncIterator[str]
            ``text/event-stream`` chunks
        """
        watcher = await self.gateway.watch_purchase_events()
        try:
            self.logger.info("Purchase event stream opened")
            return self._stream(watcher)
        except BaseException:
            await watcher.cancel()
            raise

    async def _stream(self, watcher: PurchaseEventWatcher) -> AsyncIterator[str]:
        try:
            async for event in watcher:
                payload = PurchaseEventResponse.from_entity(event).model_dump_json()
                yield f"event: purchase\ndata: {payload}\n\n"
        finally:
            await watcher.cancel()
            self.logger.info(f"Purchase event stream closed ({watcher.skipped} malformed entries skipped)")
