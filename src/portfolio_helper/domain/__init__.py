"""Domain layer: models, events and views."""
