"""Settings management module."""

from videochat.commons.settings.loader import SettingsLoader, get_settings, reset_settings
from videochat.commons.settings.models import (
    DEFAULT_TOPIC_PHRASES,
    AppSettings,
    ChunkingSettings,
    DocumentCollectionSettings,
    DocumentDBSettings,
    EmbeddingsSettings,
    ProcessingSettings,
    QueueSettings,
    Settings,
    TelemetrySettings,
    TextEmbeddingSettings,
    TranscriptionSettings,
    WorkerSettings,
)

__all__ = [
    # Loader
    "SettingsLoader",
    "get_settings",
    "reset_settings",
    # Main settings
    "Settings",
    "AppSettings",
    # Storage
    "DocumentDBSettings",
    "DocumentCollectionSettings",
    # Queue & worker
    "QueueSettings",
    "WorkerSettings",
    # AI Services
    "TranscriptionSettings",
    "EmbeddingsSettings",
    "TextEmbeddingSettings",
    # Processing
    "ChunkingSettings",
    "DEFAULT_TOPIC_PHRASES",
    "ProcessingSettings",
    # Telemetry
    "TelemetrySettings",
]
