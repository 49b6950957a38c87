"""
Provisionnement de l'utilisateur applicatif de l'Order Service.

Crée (si besoin) un rôle PostgreSQL de connexion limité à la lecture/écriture
des tables des commandes. Les autres dialectes (SQLite en test) n'ont pas de rôles:
l'étape est ignorée.
"""
import logging
from typing import List

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from order_store.orders.config import ORDER_ITEMS_TABLE, ORDERS_TABLE
from order_store.orders.exceptions import OrderProvisioningError

logger = logging.getLogger(__name__)


def _password_literal(password: str) -> str:
    # CREATE ROLE n'accepte pas de paramètre lié pour le mot de passe
    return "'" + password.replace("'", "''") + "'"


def _grant_statements(preparer, role: str, database: str) -> List[str]:
    """GRANT limités à la base, aux tables des commandes et à leurs séquences d'identifiants."""
    quoted_role = preparer.quote(role)
    tables = ", ".join(preparer.quote(table) for table in (ORDERS_TABLE, ORDER_ITEMS_TABLE))
    sequences = ", ".join(preparer.quote(f"{table}_id_seq") for table in (ORDERS_TABLE, ORDER_ITEMS_TABLE))
    return [
        f"GRANT CONNECT ON DATABASE {preparer.quote(database)} TO {quoted_role}",
        f"GRANT SELECT, INSERT, UPDATE, DELETE ON {tables} TO {quoted_role}",
        f"GRANT USAGE, SELECT ON SEQUENCE {sequences} TO {quoted_role}",
    ]


async def provision_app_role(engine: AsyncEngine, role: str, password: str, database: str) -> bool:
    """
    Crée le rôle applicatif et lui accorde les droits readWrite sur les commandes.

    Retourne True si l'étape a été exécutée, False si le dialecte ne la supporte pas.
    Idempotent: un rôle existant n'est pas recréé, les GRANT peuvent être rejoués.
    """
    if engine.dialect.name != "postgresql":
        logger.info(f"Dialecte {engine.dialect.name}: provisionnement de l'utilisateur {role} ignoré.")
        return False

    preparer = engine.dialect.identifier_preparer
    quoted_role = preparer.quote(role)
    try:
        async with engine.begin() as conn:
            result = await conn.execute(text("SELECT 1 FROM pg_roles WHERE rolname = :role"), {"role": role})
            if result.scalar_one_or_none() is None:
                await conn.execute(text(f"CREATE ROLE {quoted_role} LOGIN PASSWORD {_password_literal(password)}"))
                logger.info(f"Utilisateur {role} créé avec succès.")
            else:
                logger.info(f"Utilisateur {role} déjà présent.")
            for statement in _grant_statements(preparer, role, database):
                await conn.execute(text(statement))
    except SQLAlchemyError as e:
        logger.error(f"Erreur lors du provisionnement de l'utilisateur {role}: {e}", exc_info=True)
        raise OrderProvisioningError(role=role, reason=str(e)) from e

    logger.info(f"Droits lecture/écriture accordés à {role} sur {database}.")
    return True
