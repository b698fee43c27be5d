"""Infrastructure adapters: queue, transcription, embeddings and media tools."""
