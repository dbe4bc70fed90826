from dishka import AsyncContainer, Provider, make_async_container
from dishka.integrations.fastapi import FastapiProvider

from admin.providers import AdminProvider
from auth.providers import AuthProvider
from chain.providers import ChainProvider
from core.environment.providers import EnvironmentProvider
from core.logging.providers import LoggerProvider
from core.redis.providers import RedisProvider, CacheProvider
from sale.providers import SaleProvider
from whitelist.providers import WhitelistProvider


def make_container(chain_provider: Provider | None = None) -> AsyncContainer:
    """
    Build the application container.

    Parameters
    ----------
    chain_provider : Provider | None
        Replacement for the node-backed ``chain`` component

    Returns
    -------
    AsyncContainer
        Dependency container
    """
    return make_async_container(
        FastapiProvider(),
        EnvironmentProvider(),
        LoggerProvider(),
        RedisProvider(),
        CacheProvider(),
        chain_provider or ChainProvider(),
        AuthProvider(),
        WhitelistProvider(),
        SaleProvider(),
        AdminProvider()
    )
