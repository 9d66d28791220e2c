"""Infrastructure adapters (logging, HTTP)."""
