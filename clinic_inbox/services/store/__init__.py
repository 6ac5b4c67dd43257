"""
Persistence layer.
"""

from .datastore import Datastore, to_timestamp

__all__ = [
    "Datastore",
    "to_timestamp",
]
