__all__ = [
    "upsert",
]

from .upsert import upsert
