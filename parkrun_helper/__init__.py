from .config import AppConfig, AuthConfig, BackupConfig, CosmosConfig

__version__ = "1.0.0"
__author__ = "Parkrun Helper Organizer Team"
__url__ = "https://github.com/parkrun-helper/parkrun-helper"

__all__ = ["AppConfig", "AuthConfig", "BackupConfig", "CosmosConfig"]
