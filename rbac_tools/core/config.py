"""Application Configuration"""

from pathlib import Path

from pydantic_settings import BaseSettings
from pydantic import ConfigDict, field_validator, model_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = ConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Application
    APP_NAME: str = "Azure RBAC Tools API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"  # development, staging, production

    # Role catalogs
    DATA_DIR: str = "data"
    AZURE_ROLES_FILE: str = "roles-extended.json"
    ENTRA_ROLES_FILE: str = "entraid-roles.json"
    CATALOG_TTL_HOURS: float = 6.0
    PRELOAD_CATALOGS: bool = True

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: list[str] = ["GET", "POST"]
    CORS_ALLOW_HEADERS: list[str] = ["*"]

    # Rate Limiting
    RATE_LIMIT_PER_MINUTE: int = 10
    RATE_LIMIT_ENABLED: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or text
    LOG_HEALTH_CHECKS: bool = False

    # Search
    SEARCH_DEFAULT_LIMIT: int = 50
    SEARCH_MAX_LIMIT: int = 100

    # Role relevance scoring
    RBAC_NAMESPACE_MATCH_BONUS: int = 100
    RBAC_BROAD_WILDCARD_PENALTY: int = 50
    RBAC_ROLE_NAME_MATCH_BONUS: int = 200
    RBAC_MIN_NAME_TOKEN_LENGTH: int = 4

    @property
    def azure_roles_path(self) -> Path:
        """Location of the Azure role definitions file"""
        return Path(self.DATA_DIR) / self.AZURE_ROLES_FILE

    @property
    def entra_roles_path(self) -> Path:
        """Location of the Entra ID role definitions file"""
        return Path(self.DATA_DIR) / self.ENTRA_ROLES_FILE

    @property
    def catalog_ttl_seconds(self) -> float:
        return self.CATALOG_TTL_HOURS * 3600

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log level is one of the standard Python logging levels"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f'LOG_LEVEL must be one of {valid_levels}, got {v}')
        return v.upper()

    @field_validator('CATALOG_TTL_HOURS')
    @classmethod
    def validate_catalog_ttl(cls, v: float) -> float:
        """Validate that the catalog cache lifetime is positive"""
        if v <= 0:
            raise ValueError(f'CATALOG_TTL_HOURS must be positive, got {v}')
        return v

    @field_validator('RATE_LIMIT_PER_MINUTE', 'SEARCH_DEFAULT_LIMIT', 'SEARCH_MAX_LIMIT')
    @classmethod
    def validate_positive(cls, v: int, info) -> int:
        """Validate that counters and limits are at least 1"""
        if v < 1:
            raise ValueError(f'{info.field_name} must be at least 1, got {v}')
        return v

    @model_validator(mode='after')
    def validate_search_limits(self) -> 'Settings':
        """The default search limit may not exceed the hard cap"""
        if self.SEARCH_DEFAULT_LIMIT > self.SEARCH_MAX_LIMIT:
            raise ValueError(
                f'SEARCH_DEFAULT_LIMIT ({self.SEARCH_DEFAULT_LIMIT}) must not exceed '
                f'SEARCH_MAX_LIMIT ({self.SEARCH_MAX_LIMIT})'
            )
        return self


settings = Settings()
