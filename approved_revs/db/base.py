"""Declarative base for the approval tables."""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
