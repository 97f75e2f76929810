"""Domain models package."""

from app.models.divergence import Divergence

__all__ = [
    "Divergence",
]
