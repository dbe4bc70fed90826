import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from unittest.mock import AsyncMock, patch
import os

from dishka import Provider, Scope, provide


# Set test environment variables before imports
os.environ['ENV_FILE'] = '/nonexistent/.env'
os.environ['REDIS_HOST'] = 'localhost'
os.environ['REDIS_PORT'] = '6379'
os.environ['REDIS_DB'] = '0'
os.environ['REDIS_PASSWORD'] = ''  # No password for mock
os.environ['BLOCKCHAIN_RPC_URL'] = 'http://localhost:8545'
os.environ['CONTRACT_ADDRESS'] = ''
os.environ['TOKEN_ADDRESS'] = ''
os.environ['PRIVATE_KEY'] = ''

from chain.client import ChainClient  # noqa: E402
from chain.entities import PendingTransaction, Receipt, SaleSnapshotEntity, TransactionHandle  # noqa: E402
from chain.gateway import ContractGateway  # noqa: E402

# Hardhat/Anvil default account #0, public test key
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_SIGNER = "0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266"

SALE_ADDRESS = "0x" + "5a" * 20
TOKEN_ADDRESS = "0x" + "70" * 20
BUYER = "0x" + "ab" * 20
OTHER = "0x" + "cd" * 20
TX_HASH = "0x" + "11" * 32


class FakeChainProvider(Provider):
    """Stands in for the node-backed chain component."""

    component = "chain"

    def __init__(self, gateway, chain_client):
        super().__init__()
        self.gateway = gateway
        self.chain_client = chain_client

    @provide(scope=Scope.APP)
    def get_contract_gateway(self) -> ContractGateway:
        return self.gateway

    @provide(scope=Scope.APP)
    def get_chain_client(self) -> ChainClient:
        return self.chain_client


def make_snapshot(**overrides) -> SaleSnapshotEntity:
    values = dict(
        token_price=10**15,
        min_purchase=10**18,
        max_purchase=10**24,
        max_supply=4 * 10**27,
        start_time=1704067200,
        end_time=1706745600,
        whitelist_required=True,
        total_sold=10**27,
        total_raised=5 * 10**20,
        is_active=True
    )
    values.update(overrides)
    return SaleSnapshotEntity(**values)


def make_pending(method: str, contract: str = TOKEN_ADDRESS, success: bool = True) -> PendingTransaction:
    return PendingTransaction(
        handle=TransactionHandle(transaction_hash=TX_HASH, contract_address=contract, method=method),
        receipt=Receipt(transaction_hash=TX_HASH, success=success, block_number=42, gas_used=21000)
    )


@pytest_asyncio.fixture
async def mock_redis():
    """Mock Redis client for testing."""
    mock = AsyncMock()
    mock.ping = AsyncMock(return_value=True)
    mock.get = AsyncMock(return_value=None)
    mock.setex = AsyncMock(return_value=True)
    mock.delete = AsyncMock(return_value=1)
    mock.aclose = AsyncMock()
    return mock


@pytest.fixture
def gateway():
    """Contract gateway double; coroutines are AsyncMocks."""
    mock = AsyncMock(spec=ContractGateway)
    mock.read_only = False
    return mock


@pytest.fixture
def chain_client():
    mock = AsyncMock(spec=ChainClient)
    mock.is_connected = AsyncMock(return_value=True)
    return mock


@pytest_asyncio.fixture
async def client(mock_redis, gateway, chain_client):
    """
    Fixture for async test client with mocked Redis and chain access.

    Parameters
    ----------
    mock_redis : AsyncMock
        Mocked Redis client
    gateway : AsyncMock
        Mocked contract gateway
    chain_client : AsyncMock
        Mocked chain client

    Yields
    ------
    AsyncClient
        Async HTTP client for testing
    """
    with patch('core.redis.providers.Redis', return_value=mock_redis):
        from core.container import make_container
        from main import create_app

        container = make_container(FakeChainProvider(gateway, chain_client))
        app = create_app(container)

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac

        await container.close()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer demo-admin-token-{TEST_SIGNER}-1700000000"}
