"""Persistence layer: models, session factories and the approval repository."""
