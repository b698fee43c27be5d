"""Pydantic settings models for application configuration."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TOPIC_PHRASES = [
    "now let's",
    "moving on",
    "next we",
    "next we will",
    "so basically",
    "in summary",
    "let's talk about",
    "to conclude",
]


class AppSettings(BaseModel):
    """Application-level settings."""

    name: str = "videochat-pipeline"
    version: str = "0.1.0"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class DocumentCollectionSettings(BaseModel):
    """Document DB collection names."""

    videos: str = "videos"
    transcripts: str = "transcripts"
    chunks: str = "chunks"
    jobs: str = "jobs"


class DocumentDBSettings(BaseModel):
    """Document database settings (MongoDB)."""

    provider: Literal["mongodb"] = "mongodb"
    host: str = "localhost"
    port: int = 27017
    username: str = ""
    password: str = ""
    database: str = "videochat"
    auth_source: str = "admin"
    collections: DocumentCollectionSettings = Field(
        default_factory=DocumentCollectionSettings
    )

    @property
    def connection_string(self) -> str:
        """Build the MongoDB URI from host and credentials."""
        if self.username and self.password:
            return (
                f"mongodb://{self.username}:{self.password}"
                f"@{self.host}:{self.port}/?authSource={self.auth_source}"
            )
        return f"mongodb://{self.host}:{self.port}"


class QueueSettings(BaseModel):
    """Job queue settings."""

    name: str = "video-processing"
    lease_seconds: float = Field(default=60.0, gt=0)
    poll_interval_seconds: float = Field(default=1.0, gt=0)
    max_attempts: int = Field(default=1, ge=1, le=10)


class WorkerSettings(BaseModel):
    """Worker process settings."""

    concurrency: int = Field(default=1, ge=1, le=16)
    heartbeat_interval_seconds: float = Field(default=15.0, gt=0)
    clean_queue_on_startup: bool = False


class TranscriptionSettings(BaseModel):
    """Transcription service settings."""

    provider: Literal["openai_whisper"] = "openai_whisper"
    api_key: str = ""
    base_url: str | None = None
    model: str = "whisper-1"
    language: str | None = None
    timeout_seconds: int = 300


class TextEmbeddingSettings(BaseModel):
    """Text embedding settings."""

    provider: Literal["openai"] = "openai"
    api_key: str = ""
    base_url: str | None = None
    model: str = "text-embedding-3-small"
    dimensions: int = 1536
    batch_size: int = Field(default=100, ge=1, le=2048)


class EmbeddingsSettings(BaseModel):
    """Embedding settings."""

    text: TextEmbeddingSettings = Field(default_factory=TextEmbeddingSettings)


class ChunkingSettings(BaseModel):
    """Semantic transcript chunking configuration."""

    min_words: int = Field(default=80, ge=1)
    max_words: int = Field(default=140, ge=1)
    pause_threshold_seconds: float = Field(default=2.0, ge=0)
    topic_phrases: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TOPIC_PHRASES)
    )

    @model_validator(mode="after")
    def _check_bounds(self) -> "ChunkingSettings":
        if self.min_words > self.max_words:
            raise ValueError("min_words must not exceed max_words")
        return self


class ProcessingSettings(BaseModel):
    """Video processing settings."""

    temp_dir: str | None = None  # None uses the system temp directory
    ffmpeg_path: str = "ffmpeg"
    download_timeout_seconds: float = 300.0
    generate_embeddings: bool = True


class TelemetrySettings(BaseModel):
    """Logging settings."""

    log_format: Literal["json", "text"] = "json"
    log_level: str = "INFO"


class Settings(BaseSettings):
    """Root settings container with environment loading."""

    app: AppSettings = Field(default_factory=AppSettings)
    document_db: DocumentDBSettings = Field(default_factory=DocumentDBSettings)
    queue: QueueSettings = Field(default_factory=QueueSettings)
    worker: WorkerSettings = Field(default_factory=WorkerSettings)
    transcription: TranscriptionSettings = Field(default_factory=TranscriptionSettings)
    embeddings: EmbeddingsSettings = Field(default_factory=EmbeddingsSettings)
    chunking: ChunkingSettings = Field(default_factory=ChunkingSettings)
    processing: ProcessingSettings = Field(default_factory=ProcessingSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VIDEOCHAT__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )
