"""
Error taxonomy for the auction operator.

Everything raised inside a reconciliation cycle derives from OperatorError so
the scheduler can catch it at the cycle boundary. Errors carry the step of
the cycle and the external call that failed, for diagnosis from logs alone.
"""

from typing import Optional


class OperatorError(Exception):
    """Base class for operator failures."""

    def __init__(
        self,
        message: str,
        step: Optional[str] = None,
        call: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.step = step
        self.call = call

    def context(self) -> str:
        """Human-readable 'step=... call=...' suffix for log lines."""
        parts = []
        if self.step:
            parts.append(f"step={self.step}")
        if self.call:
            parts.append(f"call={self.call}")
        return " ".join(parts)

    def __str__(self) -> str:
        ctx = self.context()
        return f"{self.message} ({ctx})" if ctx else self.message


class ConfigError(OperatorError):
    """Missing or invalid configuration. Fatal at startup."""


class TransportError(OperatorError):
    """Connection or RPC failure talking to the ledger."""


class DispatchError(OperatorError):
    """A state-transition command was rejected, reverted, or never confirmed."""


class ClassificationError(OperatorError):
    """The observed state is internally inconsistent; retry next cycle."""
