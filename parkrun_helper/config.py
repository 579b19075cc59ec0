"""Configuration management for parkrun-helper."""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class CosmosConfig:
    """Document store configuration."""
    backend: str = "cosmos"  # cosmos, memory
    endpoint: Optional[str] = None
    key: Optional[str] = None
    database_name: str = "parkrunhelper"
    user_agent_suffix: str = "ParkrunHelperApp"

    @classmethod
    def from_env(cls) -> 'CosmosConfig':
        """Create config from environment variables."""
        return cls(
            backend=os.getenv("DOCUMENT_STORE_BACKEND", "cosmos"),
            endpoint=os.getenv("COSMOS_DB_ENDPOINT") or os.getenv("COSMOS_ENDPOINT"),
            key=os.getenv("COSMOS_DB_KEY") or os.getenv("COSMOS_KEY"),
            database_name=os.getenv("COSMOS_DB_DATABASE_NAME", "parkrunhelper"),
        )

    def __post_init__(self):
        """Validate configuration."""
        valid_backends = {"cosmos", "memory"}
        if self.backend not in valid_backends:
            raise ValueError(f"Unknown document store backend: {self.backend}. Available: {valid_backends}")
        if self.backend == "cosmos" and (not self.endpoint or not self.key):
            raise ValueError("COSMOS_DB_ENDPOINT and COSMOS_DB_KEY must be configured for the cosmos backend")


@dataclass(frozen=True)
class AuthConfig:
    """Azure AD token validation configuration."""
    tenant_id: str = ""
    client_id: str = ""
    authority_host: str = "https://login.microsoftonline.com"
    jwks_uri: Optional[str] = None
    cache_max_age: float = 86400.0  # 24 hours
    jwks_requests_per_minute: int = 10
    request_timeout: float = 10.0
    rate_limit_max_wait: float = 5.0

    @classmethod
    def from_env(cls) -> 'AuthConfig':
        """Create config from environment variables."""
        return cls(
            tenant_id=os.getenv("AZURE_TENANT_ID", ""),
            client_id=os.getenv("AZURE_CLIENT_ID", ""),
            authority_host=os.getenv("AZURE_AUTHORITY_HOST", "https://login.microsoftonline.com"),
            jwks_uri=os.getenv("JWKS_URI") or None,
            cache_max_age=float(os.getenv("JWKS_CACHE_MAX_AGE", "86400")),
            jwks_requests_per_minute=int(os.getenv("JWKS_REQUESTS_PER_MINUTE", "10")),
            request_timeout=float(os.getenv("JWKS_REQUEST_TIMEOUT", "10.0")),
            rate_limit_max_wait=float(os.getenv("JWKS_RATE_LIMIT_MAX_WAIT", "5.0")),
        )

    def __post_init__(self):
        """Validate configuration."""
        if not self.tenant_id or not self.client_id:
            raise ValueError("AZURE_TENANT_ID and AZURE_CLIENT_ID must be configured")
        if self.cache_max_age <= 0:
            raise ValueError(f"cache_max_age must be positive, got {self.cache_max_age}")
        if self.jwks_requests_per_minute <= 0:
            raise ValueError(f"jwks_requests_per_minute must be positive, got {self.jwks_requests_per_minute}")
        if not 0 < self.request_timeout <= 60:
            raise ValueError(f"request_timeout must be between 0 and 60 seconds, got {self.request_timeout}")
        if self.rate_limit_max_wait < 0:
            raise ValueError(f"rate_limit_max_wait must be non-negative, got {self.rate_limit_max_wait}")

    @property
    def issuer(self) -> str:
        return f"{self.authority_host}/{self.tenant_id}/v2.0"

    @property
    def resolved_jwks_uri(self) -> str:
        return self.jwks_uri or f"{self.authority_host}/{self.tenant_id}/discovery/v2.0/keys"

    @property
    def openid_configuration_url(self) -> str:
        return f"{self.authority_host}/{self.tenant_id}/v2.0/.well-known/openid-configuration"


@dataclass(frozen=True)
class BackupConfig:
    """Backup storage and scheduling configuration."""
    directory: str = "./backups"
    retention_days: int = 30
    automated_backups_enabled: bool = True

    @classmethod
    def from_env(cls) -> 'BackupConfig':
        """Create config from environment variables."""
        return cls(
            directory=os.getenv("BACKUP_DIRECTORY", "./backups"),
            retention_days=int(os.getenv("BACKUP_RETENTION_DAYS", "30")),
            automated_backups_enabled=os.getenv("ENABLE_AUTOMATED_BACKUPS", "true").lower() == "true",
        )

    def __post_init__(self):
        """Validate configuration."""
        if self.retention_days < 0:
            raise ValueError(f"retention_days must be non-negative, got {self.retention_days}")


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""
    cosmos: CosmosConfig = field(default_factory=lambda: CosmosConfig(backend="memory"))
    auth: AuthConfig = field(default_factory=lambda: AuthConfig(tenant_id="common", client_id="parkrun-helper"))
    backup: BackupConfig = field(default_factory=BackupConfig)

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """Create complete config from environment variables."""
        return cls(
            cosmos=CosmosConfig.from_env(),
            auth=AuthConfig.from_env(),
            backup=BackupConfig.from_env(),
        )
