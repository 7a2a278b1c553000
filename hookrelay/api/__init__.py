"""HTTP clients for the Discord REST API and the settings service."""

from .base import ApiClient
from .rest import DiscordRestClient
from .settings_service import SettingsServiceClient

__all__ = ["ApiClient", "DiscordRestClient", "SettingsServiceClient"]
