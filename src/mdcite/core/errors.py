"""Error types raised by the parser and cache"""


class ReadError(OSError):
    """A file exists but could not be read or decoded."""

    def __init__(self, path: str, cause: Exception):
        super().__init__(f"Failed to read {path}: {cause}")
        self.path = path
        self.cause = cause
