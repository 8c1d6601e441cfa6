"""Declarative base shared by all models."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all database models.

    Models register themselves on import; `medprep.models` imports every model so
    `Base.metadata` is complete once that package is loaded.
    """

    pass
