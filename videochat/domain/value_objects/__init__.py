"""Domain value objects."""

from videochat.domain.value_objects.chunking_config import ChunkingConfig

__all__ = ["ChunkingConfig"]
