# Standard Library
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Dict

# Third-Party Libraries
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# First-Party Libraries (Your project)
from order_store.database import create_session_factory
from order_store.orders.infrastructure.persistence import SQLAlchemyOrderRepository
from order_store.orders.service import OrderStoreSchema

# URL de base pour la DB en mémoire
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# --- Fixtures de Base ---

@pytest_asyncio.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Crée un engine SQLite en mémoire (une seule connexion partagée) pour chaque test."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    yield engine
    await engine.dispose()

@pytest_asyncio.fixture(scope="function")
async def schema(engine: AsyncEngine) -> OrderStoreSchema:
    """Fournit le schéma des commandes avec ses tables déjà créées."""
    order_schema = OrderStoreSchema(engine)
    await order_schema.ensure_schema()
    return order_schema

@pytest_asyncio.fixture(scope="function")
async def session_factory(schema: OrderStoreSchema, engine: AsyncEngine) -> sessionmaker:
    return create_session_factory(engine)

@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory: sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session

@pytest_asyncio.fixture(scope="function")
async def repository(db_session: AsyncSession) -> SQLAlchemyOrderRepository:
    return SQLAlchemyOrderRepository(db_session)

# --- Fixtures Documents ---

@pytest.fixture
def created_at() -> datetime:
    return datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

@pytest.fixture
def valid_order(created_at: datetime) -> Dict[str, Any]:
    """Document minimal valide: un article, statut PENDING."""
    return {
        "userId": "u1",
        "items": [
            {"productId": "p1", "productName": "Widget", "quantity": 2, "unitPrice": 9.99},
        ],
        "status": "PENDING",
        "totalAmount": 19.98,
        "createdAt": created_at,
    }
