"""Error types raised by the includer pipeline."""


class IncluderError(Exception):
    """The single error kind that leaves the includer entry point.

    Carries the toc-relative path of the include that failed.
    """

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        return f"{self.message} (toc: {self.path})"


class ConfigurationError(ValueError):
    """An includer option has a value outside its allowed set."""


class DocumentError(Exception):
    """The OpenAPI document could not be loaded, resolved or validated."""


class ExpressionError(ValueError):
    """A filter expression could not be parsed or evaluated."""
