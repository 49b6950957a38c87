"""
Tests pour le schéma de la collection des commandes (tables, contraintes et index).
"""
import pytest
from sqlalchemy import text

from order_store.orders.config import ORDER_INDEX_DEFINITIONS
from order_store.orders.exceptions import OrderIndexError, OrderSchemaViolation
from order_store.orders.infrastructure.persistence import SQLAlchemyOrderRepository
from order_store.orders.service import OrderStoreSchema

EXPECTED_INDEXES = {
    definition["name"]: [column for column, _ in definition["keys"]]
    for definition in ORDER_INDEX_DEFINITIONS
}


async def _execute(engine, *statements):
    async with engine.begin() as conn:
        for statement in statements:
            await conn.execute(text(statement))


@pytest.mark.asyncio
async def test_ensure_schema_is_idempotent(engine):
    """Test que la création de la collection peut être rejouée sans effet."""
    schema = OrderStoreSchema(engine)
    await schema.ensure_schema()
    await schema.ensure_schema()

    stats = await schema.describe()
    assert "orders" in stats["tables"]
    assert "order_items" in stats["tables"]
    assert stats["orders"] == 0

@pytest.mark.asyncio
async def test_declared_indexes_are_present(schema):
    indexes = await schema.list_indexes()
    for name, columns in EXPECTED_INDEXES.items():
        assert indexes[name] == columns

@pytest.mark.asyncio
async def test_ensure_indexes_recreates_missing_indexes(schema, engine):
    await _execute(engine, "DROP INDEX ix_orders_user_id_status", "DROP INDEX ix_order_items_product_id")

    created = await schema.ensure_indexes()

    assert sorted(created) == ["ix_order_items_product_id", "ix_orders_user_id_status"]
    indexes = await schema.list_indexes()
    assert indexes["ix_orders_user_id_status"] == ["user_id", "status"]
    assert indexes["ix_order_items_product_id"] == ["product_id"]

@pytest.mark.asyncio
async def test_ensure_indexes_is_idempotent(schema):
    """Test que deux appels successifs donnent le même ensemble d'index qu'un seul."""
    await schema.ensure_indexes()
    after_first = await schema.list_indexes()

    created = await schema.ensure_indexes()
    after_second = await schema.list_indexes()

    assert created == []
    assert after_second == after_first

@pytest.mark.asyncio
async def test_conflicting_index_is_reported(schema, engine, session_factory, valid_order):
    """Test qu'un index existant de même nom mais de clé différente est signalé sans bloquer le reste."""
    await _execute(
        engine,
        "DROP INDEX ix_orders_status",
        "CREATE INDEX ix_orders_status ON orders (notes)",
        "DROP INDEX ix_orders_total_amount",
    )

    with pytest.raises(OrderIndexError) as exc_info:
        await schema.ensure_indexes()

    assert exc_info.value.index_name == "ix_orders_status"
    indexes = await schema.list_indexes()
    # L'index conflictuel n'est pas touché, les autres sont créés
    assert indexes["ix_orders_status"] == ["notes"]
    assert indexes["ix_orders_total_amount"] == ["total_amount"]

    # La collection reste utilisable
    async with session_factory() as session:
        record = await SQLAlchemyOrderRepository(session).add(valid_order)
        await session.commit()
    assert record.id is not None

@pytest.mark.asyncio
async def test_index_with_wrong_direction_is_reported(schema, engine):
    """Test qu'un index createdAt ascendant ne passe pas pour l'index descendant attendu."""
    await _execute(
        engine,
        "DROP INDEX ix_orders_created_at_desc",
        "CREATE INDEX ix_orders_created_at_desc ON orders (created_at ASC)",
    )

    with pytest.raises(OrderIndexError) as exc_info:
        await schema.ensure_indexes()

    assert exc_info.value.index_name == "ix_orders_created_at_desc"
    assert (await schema.list_indexes())["ix_orders_created_at_desc"] == ["created_at"]

@pytest.mark.asyncio
async def test_ensure_indexes_without_tables_fails(engine):
    schema = OrderStoreSchema(engine)
    with pytest.raises(OrderIndexError):
        await schema.ensure_indexes()

@pytest.mark.asyncio
async def test_validate_uses_order_schema(schema, valid_order):
    assert schema.validate(valid_order).user_id == "u1"
    valid_order["items"][0]["quantity"] = 0
    with pytest.raises(OrderSchemaViolation):
        schema.validate(valid_order)

@pytest.mark.asyncio
async def test_describe_reports_counts(schema, session_factory, valid_order):
    async with session_factory() as session:
        repository = SQLAlchemyOrderRepository(session)
        await repository.add(valid_order)
        await repository.add(valid_order)
        await session.commit()

    stats = await schema.describe()
    assert stats["orders"] == 2
    assert stats["indexes"] >= len(EXPECTED_INDEXES)
    assert set(EXPECTED_INDEXES) <= set(stats["index_names"])
