"""astool exceptions."""


class AstoolError(Exception):
    """Base exception for astool."""

    pass


class ConfigError(AstoolError):
    """Invalid command-line or configuration value."""

    pass


class StoreConnectionError(AstoolError):
    """Could not connect to the Aerospike cluster."""

    pass


class StoreError(AstoolError):
    """A single store operation failed."""

    pass


class RecordNotFoundError(StoreError):
    """Record does not exist."""

    pass


class InvalidURLError(AstoolError):
    """Key could not be parsed as a URL."""

    pass


class InputError(AstoolError):
    """Key file could not be opened or read."""

    pass


class BatchError(AstoolError):
    """One or more keys of a batch failed."""

    def __init__(self, failures: int) -> None:
        super().__init__(f"there are {failures} errors")
        self.failures = failures


class RenderError(AstoolError):
    """Record could not be encoded as JSON."""

    pass
