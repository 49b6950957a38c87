"""
Tests pour le provisionnement de l'utilisateur applicatif.
"""
import pytest
from sqlalchemy.dialects import postgresql

from order_store.orders.provisioning import _grant_statements, _password_literal, provision_app_role


@pytest.mark.asyncio
async def test_provisioning_is_skipped_on_sqlite(engine):
    provisioned = await provision_app_role(
        engine, role="orderservice_user", password="secret", database="orderservice_db"
    )
    assert provisioned is False

def test_password_literal_escapes_quotes():
    assert _password_literal("it's") == "'it''s'"
    assert _password_literal("simple") == "'simple'"

def test_grants_target_only_order_sequences():
    preparer = postgresql.dialect().identifier_preparer
    statements = _grant_statements(preparer, role="orderservice_user", database="orderservice_db")

    assert not any("ALL SEQUENCES" in statement for statement in statements)
    assert "GRANT USAGE, SELECT ON SEQUENCE orders_id_seq, order_items_id_seq TO orderservice_user" in statements
    assert "GRANT SELECT, INSERT, UPDATE, DELETE ON orders, order_items TO orderservice_user" in statements
