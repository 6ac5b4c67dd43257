"""
Datastore-related exceptions.
"""


class DatastoreError(Exception):
    """Exception raised when a datastore read or write fails."""
    pass
