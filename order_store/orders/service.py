import logging
from typing import Any, Dict, List, Tuple

from sqlalchemy import func, inspect, select
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel import SQLModel

from order_store.orders.config import ORDER_INDEX_DEFINITIONS
from order_store.orders.domain.entities import OrderDocument
from order_store.orders.exceptions import OrderIndexError
from order_store.orders.models import ORDER_INDEXES, ORDER_TABLES, Order
from order_store.orders.validators import validate_order_document

logger = logging.getLogger(__name__)

_EXPECTED_KEYS: Dict[str, List[Tuple[str, int]]] = {
    definition["name"]: [tuple(key) for key in definition["keys"]]
    for definition in ORDER_INDEX_DEFINITIONS
}


def _reflected_keys(sync_conn: Connection, reflected: Dict[str, Any]) -> List[Tuple[str, int]]:
    """Clés (colonne, sens) d'un index réfléchi, 1 = ascendant, -1 = descendant."""
    sorting = reflected.get("column_sorting") or {}
    if not sorting and sync_conn.dialect.name == "sqlite":
        # Le dialecte SQLite ne réfléchit pas le sens des colonnes
        quoted = sync_conn.dialect.identifier_preparer.quote(reflected["name"])
        rows = sync_conn.exec_driver_sql(f"PRAGMA index_xinfo({quoted})").fetchall()
        # index_xinfo: (seqno, cid, name, desc, coll, key)
        sorting = {row[2]: ("desc",) for row in rows if row[5] and row[3]}
    return [
        (column, -1 if "desc" in sorting.get(column, ()) else 1)
        for column in reflected["column_names"]
    ]


def _reflect_indexes(sync_conn: Connection) -> Dict[str, Dict[str, Any]]:
    """Index présents en base sur les tables des commandes, par nom."""
    inspector = inspect(sync_conn)
    indexes: Dict[str, Dict[str, Any]] = {}
    for table in ORDER_TABLES:
        if not inspector.has_table(table.name):
            continue
        for reflected in inspector.get_indexes(table.name):
            indexes[reflected["name"]] = {
                "table": table.name,
                "columns": list(reflected["column_names"]),
                "keys": _reflected_keys(sync_conn, reflected),
                "unique": bool(reflected.get("unique")),
            }
    return indexes


class OrderStoreSchema:
    """
    Contrat d'intégrité de la collection des commandes.

    - `validate`: validation structurelle d'un document (à chaque insertion et mise à jour).
    - `ensure_schema`: création idempotente des tables et de leurs contraintes.
    - `ensure_indexes`: création / vérification idempotente des index secondaires.
    """

    def __init__(self, engine: AsyncEngine, reject_updated_before_created: bool = False):
        self.engine = engine
        self.reject_updated_before_created = reject_updated_before_created

    def validate(self, document: Any) -> OrderDocument:
        return validate_order_document(document, reject_updated_before_created=self.reject_updated_before_created)

    async def ensure_schema(self) -> None:
        """Crée les tables `orders` et `order_items` si elles n'existent pas encore."""
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all, tables=ORDER_TABLES)
        logger.info("Collection orders créée (ou déjà présente) avec validation de schéma.")

    async def ensure_indexes(self) -> List[str]:
        """
        Crée les index manquants et vérifie ceux qui existent déjà.

        Retourne les noms des index créés (liste vide si tout était déjà en place).
        Un index existant de même nom mais de définition différente n'est pas touché:
        les autres index sont tout de même créés, puis OrderIndexError est levée.
        """
        async with self.engine.connect() as conn:
            existing = await conn.run_sync(_reflect_indexes)

        created: List[str] = []
        conflicts: List[Tuple[str, str]] = []
        for index in ORDER_INDEXES:
            expected = _EXPECTED_KEYS[index.name]
            current = existing.get(index.name)
            if current is not None:
                if current["keys"] != expected or current["unique"]:
                    conflicts.append((index.name, f"définition existante {current['keys']} incompatible avec {expected}"))
                else:
                    logger.debug(f"Index {index.name} déjà présent.")
                continue
            try:
                async with self.engine.begin() as conn:
                    await conn.run_sync(index.create)
            except SQLAlchemyError as e:
                logger.error(f"Erreur lors de la création de l'index {index.name}: {e}", exc_info=True)
                conflicts.append((index.name, str(e)))
                continue
            created.append(index.name)
            logger.info(f"Index {index.name} créé sur {index.table.name} ({', '.join(column for column, _ in expected)}).")

        for name, reason in conflicts:
            logger.error(f"Index {name} indisponible: {reason}")
        if conflicts:
            name, reason = conflicts[0]
            raise OrderIndexError(index_name=name, reason=reason)
        return created

    async def list_indexes(self) -> Dict[str, List[str]]:
        """Index présents sur les tables des commandes: {nom: colonnes}."""
        async with self.engine.connect() as conn:
            existing = await conn.run_sync(_reflect_indexes)
        return {name: info["columns"] for name, info in existing.items()}

    async def describe(self) -> Dict[str, Any]:
        """Statistiques de la base: nombre de commandes, index et tables."""
        async with self.engine.connect() as conn:
            result = await conn.execute(select(func.count()).select_from(Order.__table__))
            orders = result.scalar_one()
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        indexes = await self.list_indexes()
        return {
            "orders": orders,
            "indexes": len(indexes),
            "index_names": sorted(indexes),
            "tables": sorted(tables),
        }
