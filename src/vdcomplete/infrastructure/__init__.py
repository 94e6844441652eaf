"""Infrastructure layer - editor buffer and backend adapters."""
