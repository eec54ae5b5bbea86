"""Payroll entry state machine with transition validation."""

from __future__ import annotations

from enum import Enum

from jm_payroll.errors import StateError


class PayrollEntryStatus(str, Enum):
    """Payroll entry status values."""

    DRAFT = "draft"
    CALCULATED = "calculated"
    APPROVED = "approved"
    PAID = "paid"
    CANCELLED = "cancelled"


class InvalidTransitionError(StateError):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.to_status = to_status
        super().__init__(from_status, f"move to '{to_status}'", reason)


class PayrollEntryStateMachine:
    """State machine for payroll entry status transitions.

    Allowed transitions:
    - draft → calculated
    - calculated → calculated (recalculate)
    - calculated → approved
    - approved → paid
    - draft | calculated | approved → cancelled
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        PayrollEntryStatus.DRAFT: [PayrollEntryStatus.CALCULATED, PayrollEntryStatus.CANCELLED],
        PayrollEntryStatus.CALCULATED: [
            PayrollEntryStatus.CALCULATED,
            PayrollEntryStatus.APPROVED,
            PayrollEntryStatus.CANCELLED,
        ],
        PayrollEntryStatus.APPROVED: [PayrollEntryStatus.PAID, PayrollEntryStatus.CANCELLED],
        PayrollEntryStatus.PAID: [],  # Terminal state
        PayrollEntryStatus.CANCELLED: [],  # Terminal state
    }

    # Statuses where (re)calculation is allowed
    CALCULATION_ALLOWED = {
        PayrollEntryStatus.DRAFT,
        PayrollEntryStatus.CALCULATED,
    }

    # Statuses where the result is frozen
    RESULTS_IMMUTABLE = {
        PayrollEntryStatus.APPROVED,
        PayrollEntryStatus.PAID,
        PayrollEntryStatus.CANCELLED,
    }

    TERMINAL = {
        PayrollEntryStatus.PAID,
        PayrollEntryStatus.CANCELLED,
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)

    @classmethod
    def can_calculate(cls, status: str) -> bool:
        """Check if calculation is allowed in this status."""
        return status in cls.CALCULATION_ALLOWED

    @classmethod
    def are_results_immutable(cls, status: str) -> bool:
        """Check if the attached result is frozen."""
        return status in cls.RESULTS_IMMUTABLE

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        return status in cls.TERMINAL

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return cls.VALID_TRANSITIONS.get(current_status, [])
