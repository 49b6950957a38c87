import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from order_store.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def create_engine_from_settings(config: Optional[Settings] = None) -> AsyncEngine:
    """Crée le moteur asynchrone à partir de la configuration."""
    config = config or default_settings
    engine = create_async_engine(
        config.database_url,
        echo=config.DB_ECHO_LOG,  # Utiliser la variable de config pour echo
        future=True,  # Utilise l'API 2.0 de SQLAlchemy
    )
    logger.info(f"Moteur SQLAlchemy Async configuré (dialecte: {engine.dialect.name}).")
    return engine


def create_session_factory(engine: AsyncEngine) -> sessionmaker:
    """Crée une factory de sessions asynchrones liée au moteur."""
    return sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,  # Empêche les objets d'expirer après commit
    )
