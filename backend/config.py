"""
Configuration management for SchoolFees backend.
"""

from functools import lru_cache
from typing import Literal, List, Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # CORS - comma-separated list of allowed origins
    cors_origins: str = "http://localhost:3000,http://localhost:3001"
    frontend_url: str = "http://localhost:3000"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Debug
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"

    # Supabase Auth (school administrators)
    supabase_url: str = ""
    supabase_anon_key: str = ""

    # Superadmin credentials
    # Validated on every request, never at startup. Empty means "not set".
    superadmin_username: Optional[str] = None
    superadmin_password: Optional[str] = None
    superadmin_auth_token: Optional[str] = None
    superadmin_constant_time_compare: bool = False

    # Page paths used by the auth gates for redirects
    superadmin_login_path: str = "/superadmin/login"
    superadmin_landing_path: str = "/superadmin"
    tenant_login_path: str = "/login"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def missing_superadmin_settings(self) -> List[str]:
        """
        Names of superadmin environment variables that are unset or empty.
        """
        missing = []
        if not self.superadmin_username:
            missing.append("SUPERADMIN_USERNAME")
        if not self.superadmin_password:
            missing.append("SUPERADMIN_PASSWORD")
        if not self.superadmin_auth_token:
            missing.append("SUPERADMIN_AUTH_TOKEN")
        return missing


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience exports
settings = get_settings()
