"""Application layer - services composing the domain and infrastructure."""
