"""Infrastructure layer: concrete adapters for the core protocols."""
