from fastapi import Header

from auth.schemas import AdminPrincipal
from auth.usecases import DEMO_TOKEN_PREFIX
from chain.codec import format_address, parse_address
from core.exceptions import InvalidFormatException, UnauthorizedException

BEARER_PREFIX = "Bearer "


async def require_admin(authorization: str | None = Header(default=None)) -> AdminPrincipal:
    """
    Admin guard for protected routes.

    Accepts ``Authorization: Bearer demo-admin-token...``. There is no JWT
    verification behind this.

    Parameters
    ----------
    authorization : str | None
        Authorization header

    Returns
    -------
    AdminPrincipal
        Caller identity

    Raises
    ------
    UnauthorizedException
        If the header is missing, malformed or carries an unknown token
    """
    if not authorization:
        raise UnauthorizedException("Authorization header required")
    if not authorization.startswith(BEARER_PREFIX) or len(authorization) <= len(BEARER_PREFIX):
        raise UnauthorizedException("Invalid authorization format")

    token = authorization[len(BEARER_PREFIX):]
    if not token.startswith(DEMO_TOKEN_PREFIX):
        raise UnauthorizedException("Invalid token")

    # demo-admin-token-<address>-<issued at>
    address = None
    parts = token[len(DEMO_TOKEN_PREFIX):].split("-")
    if len(parts) >= 2:
        try:
            address = format_address(parse_address(parts[1]))
        except InvalidFormatException:
            address = None
    return AdminPrincipal(address=address, role="admin")
