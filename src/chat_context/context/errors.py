"""
Exceptions raised by the context store.

Scoring, reference detection and pruning never raise; only bad input at
the store boundary does.
"""


class ContextError(Exception):
    """Base class for context store errors."""


class InvalidArgumentError(ContextError, ValueError):
    """An argument passed to the store is out of its accepted domain."""

    def __init__(self, name: str, value, message: str):
        self.name = name
        self.value = value
        super().__init__(f"Invalid {name} {value!r}: {message}")


class ConfigurationError(ContextError, ValueError):
    """The store was configured with values it cannot work with."""
