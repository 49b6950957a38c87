import logging
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Charger les variables d'environnement AVANT de définir la classe Settings
load_dotenv()

DEFAULT_APP_PASSWORD = "orderservice_password"


class Settings(BaseSettings):
    """Configuration de l'initialisation de la base Order Service."""

    # --- Base de Données (compte administrateur utilisé au démarrage) ---
    POSTGRES_DB: str = "orderservice_db"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: str = "5432"
    # URL complète, prioritaire sur les composants ci-dessus (ex: sqlite+aiosqlite:///orders.db)
    DATABASE_URL: Optional[str] = None
    DB_ECHO_LOG: bool = False

    # --- Utilisateur applicatif (droits lecture/écriture uniquement) ---
    ORDER_DB_APP_USER: str = "orderservice_user"
    ORDER_DB_APP_PASSWORD: str = DEFAULT_APP_PASSWORD
    PROVISION_APP_ROLE: bool = True

    # --- Initialisation ---
    SEED_SAMPLE_DATA: bool = False
    REJECT_UPDATED_BEFORE_CREATED: bool = False
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignorer les variables d'env non définies dans le modèle
    )

    @property
    def database_url(self) -> str:
        """URL SQLAlchemy asynchrone de la base des commandes."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD or ''}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


settings = Settings()

if settings.DATABASE_URL is None and settings.POSTGRES_PASSWORD is None:
    logger.critical("La variable d'environnement POSTGRES_PASSWORD n'est pas définie!")

if settings.ORDER_DB_APP_PASSWORD == DEFAULT_APP_PASSWORD:
    logger.warning("ORDER_DB_APP_PASSWORD utilise la valeur par défaut. Veuillez définir un mot de passe fort.")

logger.info(f"Configuration chargée: DB={settings.POSTGRES_DB}@{settings.POSTGRES_HOST}, utilisateur applicatif={settings.ORDER_DB_APP_USER}")
