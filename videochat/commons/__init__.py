"""Cross-cutting concerns: settings, telemetry and storage providers."""
