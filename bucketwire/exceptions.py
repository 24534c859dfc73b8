class BucketwireProjectError(Exception):
    """Raised when no bucketwire project is found in the current or parent directories."""


class InvalidArgumentError(ValueError):
    """Raised synchronously when a subscription is declared with malformed arguments."""
