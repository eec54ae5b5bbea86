"""Payroll entry record and its lifecycle."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from jm_payroll.calculators.types import (
    CompensationProfile,
    PayrollCalculationResult,
    PeriodInputs,
)
from jm_payroll.errors import StateError, ValidationError
from jm_payroll.services.state_machine import (
    PayrollEntryStateMachine,
    PayrollEntryStatus,
)

if TYPE_CHECKING:
    from jm_payroll.calculators.engine import PayrollEngine
    from jm_payroll.calculators.rate_table import StatutoryRateTable

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def make_payroll_number(employee_id: str, period_start: date) -> str:
    """Human-readable reference, e.g. PR-202401-EMP001."""
    return f"PR-{period_start:%Y%m}-{employee_id}"


@dataclass
class StatusChange:
    """One recorded lifecycle transition."""

    from_status: PayrollEntryStatus
    to_status: PayrollEntryStatus
    at: datetime
    actor: str | None = None


@dataclass
class PayrollEntry:
    """One employee's payroll for one period.

    Mutated only through the lifecycle methods. Every method either
    completes fully or raises and leaves the entry untouched. Transitions
    on a single entry must be applied in sequence by the caller.
    """

    employee_id: str
    period_start: date
    period_end: date
    period_type: str = "monthly"
    entry_id: UUID = field(default_factory=uuid4)
    payroll_number: str = ""
    status: PayrollEntryStatus = PayrollEntryStatus.DRAFT
    result: PayrollCalculationResult | None = None
    created_at: datetime = field(default_factory=_utcnow)
    calculated_at: datetime | None = None
    approved_at: datetime | None = None
    approved_by: str | None = None
    paid_at: datetime | None = None
    pay_date: date | None = None
    cancelled_at: datetime | None = None
    cancel_reason: str | None = None
    history: list[StatusChange] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.period_end < self.period_start:
            raise ValidationError(
                "period_end", self.period_end, f"precedes period_start {self.period_start}"
            )
        if not self.payroll_number:
            self.payroll_number = make_payroll_number(self.employee_id, self.period_start)

    @property
    def is_paid(self) -> bool:
        return self.status == PayrollEntryStatus.PAID

    def calculate(
        self,
        engine: PayrollEngine,
        profile: CompensationProfile,
        inputs: PeriodInputs,
        rate_table: StatutoryRateTable | None = None,
    ) -> PayrollCalculationResult:
        """Run the engine and attach its result.

        The rate table defaults to the one effective at period start.
        """
        self._check_can_calculate()
        if profile.employee_id is not None and profile.employee_id != self.employee_id:
            raise ValidationError(
                "employee_id", profile.employee_id, f"entry belongs to {self.employee_id}"
            )

        table = rate_table or engine.resolve_rate_table(self.period_start)
        result = engine.calculate(profile, inputs, rate_table=table)
        self.attach_result(result)
        return result

    def attach_result(self, result: PayrollCalculationResult) -> None:
        """Attach a result computed elsewhere, replacing any previous one."""
        self._check_can_calculate()
        self._transition(PayrollEntryStatus.CALCULATED)
        self.result = result
        self.calculated_at = _utcnow()

    def approve(self, approved_by: str | None = None, allow_negative_net: bool = False) -> None:
        """Freeze the result for payment."""
        if self.status != PayrollEntryStatus.CALCULATED:
            raise StateError(self.status.value, "approve", "entry must be calculated first")
        if self.result is not None and self.result.is_net_negative and not allow_negative_net:
            raise StateError(
                self.status.value, "approve", f"net pay is negative ({self.result.net_pay})"
            )

        self._transition(PayrollEntryStatus.APPROVED, actor=approved_by)
        self.approved_at = _utcnow()
        self.approved_by = approved_by

    def mark_paid(self, pay_date: date | None = None) -> None:
        """Record payment. Terminal."""
        if self.status != PayrollEntryStatus.APPROVED:
            raise StateError(self.status.value, "mark paid", "entry must be approved first")

        self._transition(PayrollEntryStatus.PAID)
        self.paid_at = _utcnow()
        self.pay_date = pay_date or self.paid_at.date()

    def cancel(self, reason: str | None = None) -> None:
        """Abort the entry. Terminal; not allowed once paid."""
        if not PayrollEntryStateMachine.can_transition(
            self.status, PayrollEntryStatus.CANCELLED
        ):
            raise StateError(self.status.value, "cancel")

        self._transition(PayrollEntryStatus.CANCELLED)
        self.cancelled_at = _utcnow()
        self.cancel_reason = reason

    def snapshot(self) -> dict[str, Any]:
        """Plain-dict view for the persistence and reporting collaborators."""
        return {
            "entry_id": str(self.entry_id),
            "employee_id": self.employee_id,
            "payroll_number": self.payroll_number,
            "period_start": self.period_start.isoformat(),
            "period_end": self.period_end.isoformat(),
            "period_type": self.period_type,
            "status": self.status.value,
            "is_paid": self.is_paid,
            "result": self.result.to_canonical_dict() if self.result else None,
            "calculation_id": (
                str(self.result.calculation_id)
                if self.result and self.result.calculation_id
                else None
            ),
            "approved_by": self.approved_by,
            "pay_date": self.pay_date.isoformat() if self.pay_date else None,
            "cancel_reason": self.cancel_reason,
        }

    def _check_can_calculate(self) -> None:
        if not PayrollEntryStateMachine.can_calculate(self.status):
            raise StateError(self.status.value, "recalculate", "result is frozen")

    def _transition(self, to_status: PayrollEntryStatus, actor: str | None = None) -> None:
        PayrollEntryStateMachine.validate_transition(self.status, to_status)
        from_status = self.status
        self.status = to_status
        self.history.append(StatusChange(from_status, to_status, _utcnow(), actor))
        logger.info(
            "Payroll entry %s (%s): %s -> %s",
            self.payroll_number,
            self.entry_id,
            from_status.value,
            to_status.value,
        )
