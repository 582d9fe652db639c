"""
Configuration de l'application / Application configuration.
Utilise pydantic-settings pour charger depuis .env ou variables d'environnement.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "FleetCheck"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True

    # Database - SQLite par défaut pour le développement
    # Database - SQLite by default for development
    DATABASE_URL: str = "sqlite+aiosqlite:///./fleetcheck.db"

    # CORS - origines autorisées / allowed origins
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Rate Limiting
    RATE_LIMIT_CHECKLIST_WRITE: str = "30/minute"

    # Fuseau de reference pour les dates calendaires / Reference time zone for calendar dates
    REFERENCE_TIMEZONE: str = "America/Manaus"

    # Configuration checklist legacy / Legacy checklist configuration
    LEGACY_SETTINGS_KEY: str = "obs_config"
    # Vide = table app_settings locale / Empty = local app_settings table
    LEGACY_SETTINGS_URL: str = ""
    LEGACY_SETTINGS_TIMEOUT_SECONDS: float = 2.0
    LEGACY_SETTINGS_TTL_SECONDS: float = 300.0

    # Cache des vues (km vehicule, checklists ouverts) / View cache (vehicle km, open checklists)
    VIEW_CACHE_TTL_SECONDS: float = 30.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
