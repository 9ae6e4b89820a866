# config/settings.py

from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
import os
import warnings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "EcoRank"
    DEBUG: bool = False
    ENVIRONMENT: str = Field(default="development", pattern="^(development|staging|production|test)$")

    # CORS
    CORS_ORIGINS: str = ""

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        if not self.CORS_ORIGINS:
            return ["*"] if self.DEBUG else []
        return [s.strip() for s in self.CORS_ORIGINS.split(",") if s.strip()]

    # Database
    DATABASE_URL: str = "sqlite:///./ecorank.db"
    DB_POOL_SIZE: int = Field(default=20, ge=5, le=100)
    DB_MAX_OVERFLOW: int = Field(default=30, ge=5, le=100)
    DB_POOL_RECYCLE: int = Field(default=3600, ge=300)

    # Redis (optional, in-process cache when unset)
    REDIS_URL: Optional[str] = None

    # Identity provider tokens
    IDENTITY_JWT_SECRET: str = Field(default="change-me-in-production", min_length=8)
    IDENTITY_JWT_ALGORITHM: str = "HS256"
    IDENTITY_AUDIENCE: Optional[str] = None

    # Caching
    CACHE_DEFAULT_TTL: int = Field(default=300, ge=1)  # 5 minutes default

    # Submission limits
    SUBMISSION_RATE_LIMIT: int = Field(default=5, ge=1)
    SUBMISSION_RATE_WINDOW: int = Field(default=60, ge=1)
    RECYCLING_DAILY_ITEM_LIMIT: int = Field(default=100, ge=1)
    SHOWER_DAILY_LIMIT: int = Field(default=3, ge=1)
    SHOWER_DAILY_SKIPS: int = Field(default=1, ge=0)

    # Crews
    JOIN_CODE_LENGTH: int = Field(default=6, ge=4, le=12)

    # External providers
    GOOGLE_MAPS_API_KEY: Optional[str] = None
    GOOGLE_DIRECTIONS_URL: str = "https://maps.googleapis.com/maps/api/directions/json"
    NHTSA_API_URL: str = "https://vpic.nhtsa.dot.gov/api/vehicles"
    PROVIDER_TIMEOUT: int = Field(default=10, ge=1, le=120)

    # Monitoring
    LOG_LEVEL: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    # Worker
    CHALLENGE_SWEEP_MINUTES: int = Field(default=15, ge=1)

    # Server
    PORT: Optional[int] = Field(default=8000, ge=1, le=65535)

    @field_validator('IDENTITY_JWT_SECRET')
    @classmethod
    def validate_secret(cls, v):
        """Warn if the identity secret is too short for production"""
        if len(v) < 32:
            warnings.warn(f"Identity secret is only {len(v)} characters. Consider using at least 32 characters for production.", UserWarning)
        return v

    @field_validator('DATABASE_URL')
    @classmethod
    def validate_database_url(cls, v):
        """Validate database URL format"""
        if not v.startswith(('postgresql://', 'postgresql+psycopg2://', 'sqlite://')):
            raise ValueError('Unsupported database URL format')
        return v

    @field_validator('REDIS_URL')
    @classmethod
    def validate_redis_url(cls, v):
        """Validate Redis URL format"""
        if v and not v.startswith(('redis://', 'rediss://')):
            raise ValueError('Invalid Redis URL format')
        return v

    @field_validator('CORS_ORIGINS')
    @classmethod
    def validate_cors_origins(cls, v):
        """Validate CORS origins in production"""
        environment = os.getenv('ENVIRONMENT', 'development')
        if environment == 'production' and ('*' in v or not v):
            raise ValueError('Wildcard CORS origins not allowed in production')
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.ENVIRONMENT == "production"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
