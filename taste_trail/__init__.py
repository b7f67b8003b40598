# Lightweight package root: migrations import Base from here without pulling in services.
from taste_trail.shared.models.base import Base

__all__ = ["Base"]
