"""Video transcription, semantic chunking and processing pipeline."""

__version__ = "0.1.0"
