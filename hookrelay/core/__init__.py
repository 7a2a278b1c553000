"""Core modules for hookrelay."""

from .index import WebhookIndex
from .pool import Selection, SelectionOutcome, WebhookPool, can_manage_webhooks
from .settings_cache import Loaded, SettingsCache, Unloaded
from .sync import KeyedLock, SingleFlight

__all__ = [
    "WebhookIndex",
    "WebhookPool",
    "Selection",
    "SelectionOutcome",
    "can_manage_webhooks",
    "SettingsCache",
    "Loaded",
    "Unloaded",
    "KeyedLock",
    "SingleFlight",
]
