import logging
from typing import Annotated

from dishka import FromComponent, Provider, Scope, provide

from auth.usecases import LoginUseCase
from core.environment.config import Settings


class AuthProvider(Provider):
    """
    Provider for authentication use cases.
    """

    component = "auth"

    @provide(scope=Scope.REQUEST)
    def get_login_use_case(
        self,
        settings: Annotated[Settings, FromComponent("environment")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> LoginUseCase:
        return LoginUseCase(settings=settings, logger=logger)
