"""
Error taxonomy for resource discovery.

Every failure the engine can survive is one of these.  ``discover()``
records them in ``DiscoverResult.errors``; the single-file entry points
raise them directly.
"""


class DiscoveryError(Exception):
    """Base class for all discovery failures."""

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


class RootAccessError(DiscoveryError):
    """A root path is missing or cannot be accessed."""


class WalkError(DiscoveryError):
    """A directory could not be listed during traversal."""


class SourceReadError(DiscoveryError):
    """A source file could not be read."""


class GoParseError(DiscoveryError):
    """Malformed Go source.  ``line`` and ``column`` are 1-indexed."""

    def __init__(self, path: str, line: int, column: int, message: str):
        self.line = line
        self.column = column
        super().__init__(path, message)

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}: {self.message}"

