import os

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chain.codec import format_address, parse_address


class Settings(BaseSettings):
    """
    Application settings using Pydantic Settings.

    Attributes
    ----------
    environment : str
        Deployment environment (development, production)
    log_level : str
        Root log level
    blockchain_rpc_url : str
        Node HTTP RPC endpoint
    contract_address : str | None
        Sale contract address; sale operations are disabled when unset
    token_address : str | None
        Token contract address; whitelist operations are disabled when unset
    private_key : SecretStr | None
        Hex signing key; read-only mode when unset
    redis_host : str
        Redis host for caching
    redis_port : int
        Redis port
    redis_db : int
        Redis database number
    redis_password : str
        Redis password (optional)
    admin_address : str
        Address accepted by the demo admin login
    call_timeout : float
        Deadline for each node request, in seconds
    transaction_timeout : float
        Deadline for a transaction to be mined, in seconds
    gas_limit : int
        Gas limit for state-changing calls
    gas_price : int | None
        Fixed gas price in wei; node suggestion when unset
    log_poll_interval : float
        Seconds between receipt and log filter polls
    whitelist_cache_ttl : int
        Seconds a whitelist status lookup stays cached
    allowed_origins : list[str]
        CORS origins
    """

    environment: str = "development"
    log_level: str = "INFO"

    blockchain_rpc_url: str = "http://localhost:8545"
    contract_address: str | None = None
    token_address: str | None = None
    private_key: SecretStr | None = None

    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: str = ""

    admin_address: str = "0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266"

    call_timeout: float = 10.0
    transaction_timeout: float = 30.0
    gas_limit: int = 300000
    gas_price: int | None = None
    log_poll_interval: float = 2.0
    whitelist_cache_ttl: int = 30

    allowed_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
        "https://localhost:3000",
        "https://localhost:3001",
    ]

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("contract_address", "token_address", mode="before")
    @classmethod
    def validate_contract_address(cls, v: str | None) -> str | None:
        if v is None or not str(v).strip():
            return None
        return format_address(parse_address(str(v).strip()))

    @field_validator("admin_address")
    @classmethod
    def validate_admin_address(cls, v: str) -> str:
        return format_address(parse_address(v))

    @field_validator("private_key", mode="before")
    @classmethod
    def validate_private_key(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return v

    @field_validator("gas_price", mode="before")
    @classmethod
    def validate_gas_price(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"
