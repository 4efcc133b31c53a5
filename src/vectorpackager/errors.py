"""Domain errors for vectorpackager."""


class PackagerError(RuntimeError):
    """Raised when the packaging run cannot continue."""
