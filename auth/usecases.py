import logging
import time

from auth.schemas import LoginData
from core.environment.config import Settings
from core.exceptions import ForbiddenException

DEMO_TOKEN_PREFIX = "demo-admin-token"


class LoginUseCase:
    """
    Demo admin login.

    Only the configured admin address gets a token. The signature is not
    checked and the token is not a JWT; admin routes accept any token with
    the demo prefix.

    Parameters
    ----------
    settings : Settings
        Application settings
    logger : logging.Logger
        Logger instance
    """

    def __init__(self, settings: Settings, logger: logging.Logger):
        self.settings = settings
        self.logger = logger

    async def __call__(self, address: str) -> LoginData:
        """
        Execute use case.

        Parameters
        ----------
        address : str
            Normalized wallet address

        Returns
        -------
        LoginData
            Issued token and role

        Raises
        ------
        ForbiddenException
            If the address is not the admin
        """
        if address != self.settings.admin_address:
            self.logger.warning(f"Rejected admin login for {address}")
            raise ForbiddenException("Not authorized as admin")

        token = f"{DEMO_TOKEN_PREFIX}-{address}-{int(time.time())}"
        self.logger.info(f"Issued demo admin token for {address}")
        return LoginData(token=token, address=address, role="admin")
