import logging

from dishka import Provider, Scope, provide
from core.environment.config import Settings

OPTIONAL_SETTINGS = ("contract_address", "token_address", "private_key")


class EnvironmentProvider(Provider):
    """
    Provider for environment configuration.
    """

    component = "environment"
    scope = Scope.APP

    @provide
    def get_environment(self) -> Settings:
        """
        Load settings and warn about optional values left unset.

        Returns
        -------
        Settings
            Application settings instance
        """
        settings = Settings()
        logger = logging.getLogger("token_sale_api")
        for name in OPTIONAL_SETTINGS:
            if getattr(settings, name) is None:
                logger.warning(f"Optional environment variable {name.upper()} is not set")
        return settings
