class PersistenceError(Exception):
    """Raised when a storage read or write fails."""
