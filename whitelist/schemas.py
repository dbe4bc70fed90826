from pydantic import BaseModel, ConfigDict


class WhitelistStatusData(BaseModel):
    """
    Whitelist status of one address.

    Attributes
    ----------
    address : str
        Normalized address
    is_whitelisted : bool
        Membership in the token contract whitelist
    """
    address: str
    is_whitelisted: bool

    model_config = ConfigDict(from_attributes=True)


class WhitelistVerifyData(BaseModel):
    address: str
    verified: bool = False
