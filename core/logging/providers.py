import logging
import sys
from typing import Annotated

from dishka import FromComponent, Provider, Scope, provide

from core.environment.config import Settings

LOGGER_NAME = "token_sale_api"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure console logging once and return the service logger.

    Parameters
    ----------
    level : str
        Log level name

    Returns
    -------
    logging.Logger
        Service logger
    """
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=logging.INFO,
            format=LOG_FORMAT,
            handlers=[
                logging.StreamHandler(sys.stdout)
            ]
        )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())
    return logger


class LoggerProvider(Provider):
    """
    Provider for logging configuration and logger instances.

    Logs go to stdout; the level comes from ``LOG_LEVEL``, with DEBUG
    forced outside production when no level is given.
    """
    component = "logger"

    @provide(scope=Scope.APP)
    def get_logger(
        self,
        settings: Annotated[Settings, FromComponent("environment")]
    ) -> logging.Logger:
        """
        Provide configured logger instance.

        Parameters
        ----------
        settings : Settings
            Application settings

        Returns
        -------
        logging.Logger
            Configured logger that writes to console
        """
        level = settings.log_level
        if not settings.is_production and "log_level" not in settings.model_fields_set:
            level = "DEBUG"
        return configure_logging(level)
