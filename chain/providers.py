import logging
from typing import Annotated, AsyncIterable

from dishka import FromComponent, Provider, Scope, provide
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3

from chain.abi import ContractDescriptor
from chain.client import ChainClient
from chain.codec import parse_address
from chain.entities import GasPolicy
from chain.gateway import ContractGateway
from core.environment.config import Settings
from core.exceptions import SigningException


def load_account(settings: Settings) -> LocalAccount | None:
    """
    Build the signing account from settings.

    Parameters
    ----------
    settings : Settings
        Application settings

    Returns
    -------
    LocalAccount | None
        Account, or None for read-only mode

    Raises
    ------
    SigningException
        If the configured key cannot be parsed
    """
    if settings.private_key is None:
        return None
    try:
        return Account.from_key(settings.private_key.get_secret_value())
    except (ValueError, TypeError) as e:
        raise SigningException(f"Failed to parse private key: {e}") from None


class ChainProvider(Provider):
    """
    Provider for the node client and contract gateway.
    """

    component = "chain"

    @provide(scope=Scope.APP)
    async def get_web3(
        self,
        settings: Annotated[Settings, FromComponent("environment")]
    ) -> AsyncIterable[AsyncWeb3]:
        """
        Provide the Web3 client, closing its HTTP session on shutdown.

        Parameters
        ----------
        settings : Settings
            Application settings

        Yields
        ------
        AsyncWeb3
            Web3 client
        """
        web3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(
            settings.blockchain_rpc_url,
            request_kwargs={"timeout": settings.call_timeout}
        ))
        try:
            yield web3
        finally:
            await web3.provider.disconnect()

    @provide(scope=Scope.APP)
    def get_descriptor(self) -> ContractDescriptor:
        return ContractDescriptor()

    @provide(scope=Scope.APP)
    def get_chain_client(
        self,
        web3: Annotated[AsyncWeb3, FromComponent("chain")],
        descriptor: Annotated[ContractDescriptor, FromComponent("chain")],
        settings: Annotated[Settings, FromComponent("environment")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> ChainClient:
        """
        Provide the chain client adapter.

        Parameters
        ----------
        web3 : AsyncWeb3
            Web3 client
        descriptor : ContractDescriptor
            Contract interface descriptor
        settings : Settings
            Application settings
        logger : logging.Logger
            Logger instance

        Returns
        -------
        ChainClient
            Chain client adapter
        """
        return ChainClient(
            web3=web3,
            descriptor=descriptor,
            logger=logger,
            poll_interval=settings.log_poll_interval
        )

    @provide(scope=Scope.APP)
    def get_contract_gateway(
        self,
        client: Annotated[ChainClient, FromComponent("chain")],
        descriptor: Annotated[ContractDescriptor, FromComponent("chain")],
        settings: Annotated[Settings, FromComponent("environment")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> ContractGateway:
        """
        Provide the contract gateway.

        Unset contract addresses and a missing key are passed through as
        None; the gateway rejects the affected operations.

        Parameters
        ----------
        client : ChainClient
            Chain client adapter
        descriptor : ContractDescriptor
            Contract interface descriptor
        settings : Settings
            Application settings
        logger : logging.Logger
            Logger instance

        Returns
        -------
        ContractGateway
            Contract gateway
        """
        account = load_account(settings)
        if account is None:
            logger.info("No private key configured, contract gateway is read-only")

        return ContractGateway(
            client=client,
            descriptor=descriptor,
            logger=logger,
            sale_address=parse_address(settings.contract_address) if settings.contract_address else None,
            token_address=parse_address(settings.token_address) if settings.token_address else None,
            account=account,
            gas_policy=GasPolicy(gas_limit=settings.gas_limit, gas_price=settings.gas_price),
            call_timeout=settings.call_timeout,
            confirmation_timeout=settings.transaction_timeout
        )
