"""Configuration for FastAPI application."""

from pydantic_settings import BaseSettings
from pydantic import validator
from typing import List, Optional, Union
import json

DEFAULT_ORIGINS = ["http://localhost:3000", "http://localhost:5173"]


class Settings(BaseSettings):
    # API Configuration
    api_prefix: str = "/api"
    api_title: str = "Parkrun Helper API"
    api_version: str = "1.0.0"
    environment: str = "development"
    allowed_origins: Union[str, List[str]] = DEFAULT_ORIGINS
    frontend_url: Optional[str] = None

    @validator('allowed_origins', pre=True)
    def parse_allowed_origins(cls, v):
        """Parse allowed_origins from string or list."""
        if isinstance(v, str):
            # If it's a JSON array string, parse it
            if v.startswith('['):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    return [v]
            # Comma separated origins
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @property
    def cors_origins(self) -> List[str]:
        """Allowed origins plus the deployed frontend, if configured."""
        origins = list(self.allowed_origins)
        if self.frontend_url and self.frontend_url not in origins:
            origins.append(self.frontend_url)
        return origins

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra environment variables


settings = Settings()
