"""
Exception types raised by the spinham parameter core.
"""


class SpinHamError(Exception):
    """Base class for all spinham errors."""


class UnsupportedOperationError(SpinHamError, NotImplementedError):
    """
    Raised when an operation has no implementation for the active Hamiltonian.

    The parameter store is left untouched when this is raised.

    Attributes:
        operation (str): Name of the rejected operation.
        hamiltonian_name (str): Display name of the active Hamiltonian.
    """

    def __init__(self, operation: str, hamiltonian_name: str):
        self.operation = operation
        self.hamiltonian_name = hamiltonian_name
        super().__init__(
            f"'{operation}' is not supported by Hamiltonian '{hamiltonian_name}'"
        )


class ConfigurationError(SpinHamError, ValueError):
    """Raised when a configuration file cannot be parsed or validated."""
