"""Error taxonomy for the payroll engine.

All errors are local, synchronous and non-retryable: the engine performs no I/O,
so there is no transient-failure category.
"""

from __future__ import annotations

from typing import Any


class PayrollError(Exception):
    """Base class for engine errors."""

    code = "PAYROLL_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)


class ValidationError(PayrollError):
    """Raised when caller input is malformed or out of range."""

    code = "VALIDATION_ERROR"

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(
            f"Invalid value for '{field}' ({value}): {reason}",
            {"field": field, "value": str(value)},
        )


class ConfigurationError(PayrollError):
    """Raised when a statutory rate table is malformed."""

    code = "CONFIGURATION_ERROR"

    def __init__(self, reason: str, field: str | None = None, version: str | None = None):
        self.reason = reason
        self.field = field
        self.version = version
        msg = "Invalid rate table"
        if version:
            msg += f" '{version}'"
        if field:
            msg += f" ({field})"
        super().__init__(
            f"{msg}: {reason}",
            {"field": field, "version": version},
        )


class StateError(PayrollError):
    """Raised when a payroll entry lifecycle action is not allowed."""

    code = "STATE_ERROR"

    def __init__(self, from_status: str, action: str, reason: str | None = None):
        self.from_status = from_status
        self.action = action
        self.reason = reason
        msg = f"Cannot {action} payroll entry in status '{from_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, {"status": from_status, "action": action})
