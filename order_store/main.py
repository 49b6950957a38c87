"""
Point d'entrée de l'initialisation de la base Order Service.

Exécuté au premier démarrage du conteneur (et à chaque redémarrage: chaque étape
est idempotente). Enchaîne la création de la collection validée, le provisionnement
de l'utilisateur applicatif, la création des index, l'insertion optionnelle des
données de test puis l'affichage des statistiques.
"""
import argparse
import asyncio
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from order_store.config import Settings, settings
from order_store.database import create_engine_from_settings, create_session_factory
from order_store.orders.exceptions import OrderIndexError, OrderProvisioningError
from order_store.orders.infrastructure.persistence import SQLAlchemyOrderRepository
from order_store.orders.provisioning import provision_app_role
from order_store.orders.sample_data import seed_sample_orders
from order_store.orders.service import OrderStoreSchema

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INDEX_ERROR = 1
EXIT_PROVISIONING_ERROR = 2


async def bootstrap(engine: AsyncEngine, config: Settings) -> Dict[str, Any]:
    """Initialise la base et retourne le rapport final (statistiques + erreur d'index éventuelle)."""
    logger.info("Initialisation de la base de données Order Service...")
    schema = OrderStoreSchema(engine, reject_updated_before_created=config.REJECT_UPDATED_BEFORE_CREATED)

    await schema.ensure_schema()

    # Doit précéder toute écriture validée; les GRANT portent sur les tables créées ci-dessus
    if config.PROVISION_APP_ROLE:
        await provision_app_role(
            engine,
            role=config.ORDER_DB_APP_USER,
            password=config.ORDER_DB_APP_PASSWORD,
            database=config.POSTGRES_DB,
        )

    index_error: Optional[OrderIndexError] = None
    try:
        created = await schema.ensure_indexes()
        logger.info(f"Index créés pour optimiser les performances ({len(created)} nouveau(x)).")
    except OrderIndexError as e:
        # La base reste utilisable sans cet index (performances dégradées seulement)
        logger.error(f"Initialisation des index incomplète: {e.message}")
        index_error = e

    if config.SEED_SAMPLE_DATA:
        session_factory = create_session_factory(engine)
        async with session_factory() as session:
            repository = SQLAlchemyOrderRepository(
                session, reject_updated_before_created=config.REJECT_UPDATED_BEFORE_CREATED
            )
            await seed_sample_orders(repository)
            await session.commit()

    stats = await schema.describe()
    logger.info("Statistiques de la base de données :")
    logger.info(f"- Nombre de commandes : {stats['orders']}")
    logger.info(f"- Index créés : {stats['indexes']}")
    logger.info(f"- Tables : {', '.join(stats['tables'])}")
    if index_error is None:
        logger.info("Initialisation de la base de données Order Service terminée avec succès!")

    return {**stats, "index_error": index_error.message if index_error else None}


async def _run(config: Settings) -> Dict[str, Any]:
    engine = create_engine_from_settings(config)
    try:
        return await bootstrap(engine, config)
    finally:
        await engine.dispose()


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Initialise la base de données de l'Order Service.")
    parser.add_argument("--database-url", help="URL SQLAlchemy asynchrone (remplace DATABASE_URL)")
    parser.add_argument("--seed", action=argparse.BooleanOptionalAction, default=None,
                        help="Insérer les commandes de test si la collection est vide")
    parser.add_argument("--provision", action=argparse.BooleanOptionalAction, default=None,
                        help="Créer l'utilisateur applicatif (PostgreSQL uniquement)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)

    overrides: Dict[str, Any] = {}
    if args.database_url:
        overrides["DATABASE_URL"] = args.database_url
    if args.seed is not None:
        overrides["SEED_SAMPLE_DATA"] = args.seed
    if args.provision is not None:
        overrides["PROVISION_APP_ROLE"] = args.provision
    config = settings.model_copy(update=overrides)

    # Configurer le logging
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        report = asyncio.run(_run(config))
    except OrderProvisioningError as e:
        logger.critical(f"Initialisation interrompue: {e.message}")
        return EXIT_PROVISIONING_ERROR

    return EXIT_INDEX_ERROR if report["index_error"] else EXIT_OK
