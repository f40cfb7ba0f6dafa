class StoreUnavailableError(RuntimeError):
    """The backing key-value store could not be read or written."""
