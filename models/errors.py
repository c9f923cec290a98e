class RasterError(Exception):
    """Base class for raster conversion failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class DecodeError(RasterError):
    """Raised when encoded bytes cannot be turned into a RasterImage."""


class EncodeError(RasterError):
    """Raised when a RasterImage cannot be written in the requested format."""


class InvalidActionError(Exception):
    """Raised when an editor action is not enabled in the current session state."""


class UnknownOperationError(KeyError):
    """Raised when a transform name has no registered engine operation."""

    def __str__(self):
        return f"Unknown operation: {self.args[0]!r}" if self.args else "Unknown operation"
