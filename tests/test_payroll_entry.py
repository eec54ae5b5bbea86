"""Tests for the payroll entry lifecycle."""

from datetime import date
from decimal import Decimal

import pytest

from jm_payroll.errors import StateError, ValidationError
from jm_payroll.services.payroll_entry import PayrollEntry, make_payroll_number
from jm_payroll.services.state_machine import PayrollEntryStatus

from tests.conftest import PERIOD_END, PERIOD_START, make_inputs, make_profile


@pytest.fixture
def entry() -> PayrollEntry:
    return PayrollEntry(employee_id="EMP001", period_start=PERIOD_START, period_end=PERIOD_END)


def calculated(entry, engine, base="100000", **inputs) -> PayrollEntry:
    entry.calculate(engine, make_profile(base, employee_id="EMP001"), make_inputs(**inputs))
    return entry


class TestCreation:
    def test_new_entry_is_draft(self, entry):
        assert entry.status == PayrollEntryStatus.DRAFT
        assert entry.result is None
        assert entry.is_paid is False

    def test_payroll_number(self, entry):
        assert entry.payroll_number == "PR-202401-EMP001"
        assert make_payroll_number("E9", date(2024, 11, 15)) == "PR-202411-E9"

    def test_period_end_before_start_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            PayrollEntry(employee_id="EMP001", period_start=PERIOD_END, period_end=PERIOD_START)
        assert exc_info.value.field == "period_end"


class TestCalculate:
    def test_calculate_attaches_result(self, entry, engine):
        result = entry.calculate(engine, make_profile("100000"), make_inputs())

        assert entry.status == PayrollEntryStatus.CALCULATED
        assert entry.result is result
        assert result.net_pay == Decimal("91750.00")
        assert entry.calculated_at is not None

    def test_recalculate_replaces_result(self, entry, engine):
        calculated(entry, engine)
        result = entry.calculate(engine, make_profile("500000"), make_inputs())

        assert entry.status == PayrollEntryStatus.CALCULATED
        assert entry.result is result
        assert entry.result.net_pay == Decimal("367000.00")

    def test_failed_calculation_leaves_draft_untouched(self, entry, engine):
        with pytest.raises(ValidationError):
            entry.calculate(engine, make_profile("100000"), make_inputs(bonus="-1"))

        assert entry.status == PayrollEntryStatus.DRAFT
        assert entry.result is None
        assert entry.history == []

    def test_failed_recalculation_keeps_previous_result(self, entry, engine):
        calculated(entry, engine)
        previous = entry.result

        with pytest.raises(ValidationError):
            entry.calculate(
                engine, make_profile("100000", overtime_multiplier=Decimal("0.5")), make_inputs()
            )

        assert entry.status == PayrollEntryStatus.CALCULATED
        assert entry.result is previous

    def test_profile_for_other_employee_rejected(self, entry, engine):
        with pytest.raises(ValidationError) as exc_info:
            entry.calculate(engine, make_profile("100000", employee_id="EMP999"), make_inputs())
        assert exc_info.value.field == "employee_id"
        assert entry.status == PayrollEntryStatus.DRAFT

    def test_uses_table_effective_at_period_start(self, entry, engine):
        calculated(entry, engine)
        assert entry.result.rate_table_version == "JM-2024"


class TestApproveAndPay:
    def test_full_lifecycle(self, entry, engine):
        calculated(entry, engine)
        entry.approve(approved_by="admin")
        entry.mark_paid(pay_date=date(2024, 1, 31))

        assert entry.status == PayrollEntryStatus.PAID
        assert entry.is_paid is True
        assert entry.approved_by == "admin"
        assert entry.pay_date == date(2024, 1, 31)
        assert [(c.from_status, c.to_status) for c in entry.history] == [
            (PayrollEntryStatus.DRAFT, PayrollEntryStatus.CALCULATED),
            (PayrollEntryStatus.CALCULATED, PayrollEntryStatus.APPROVED),
            (PayrollEntryStatus.APPROVED, PayrollEntryStatus.PAID),
        ]

    def test_cannot_approve_draft(self, entry):
        with pytest.raises(StateError):
            entry.approve()
        assert entry.status == PayrollEntryStatus.DRAFT

    def test_cannot_pay_unapproved(self, entry, engine):
        calculated(entry, engine)
        with pytest.raises(StateError):
            entry.mark_paid()
        assert entry.status == PayrollEntryStatus.CALCULATED

    def test_negative_net_blocks_approval_by_default(self, entry, engine):
        calculated(entry, engine, base="10000", other_deductions="20000")
        assert entry.result.is_net_negative is True

        with pytest.raises(StateError) as exc_info:
            entry.approve()
        assert "-10825.00" in str(exc_info.value)
        assert entry.status == PayrollEntryStatus.CALCULATED

        entry.approve(allow_negative_net=True)
        assert entry.status == PayrollEntryStatus.APPROVED

    def test_default_pay_date(self, entry, engine):
        calculated(entry, engine)
        entry.approve()
        entry.mark_paid()
        assert entry.pay_date == entry.paid_at.date()


class TestRecalculationGuard:
    """Frozen results cannot be recomputed."""

    @pytest.mark.parametrize("final_action", ["approve", "pay", "cancel"])
    def test_recalculate_after_freeze_raises(self, entry, engine, final_action):
        calculated(entry, engine)
        entry.approve()
        if final_action == "pay":
            entry.mark_paid()
        elif final_action == "cancel":
            entry.cancel("duplicate")

        status_before = entry.status
        result_before = entry.result
        history_len = len(entry.history)

        with pytest.raises(StateError):
            entry.calculate(engine, make_profile("500000"), make_inputs())

        assert entry.status == status_before
        assert entry.result is result_before
        assert len(entry.history) == history_len

    def test_attach_result_after_approval_raises(self, entry, engine):
        calculated(entry, engine)
        entry.approve()
        other = engine.calculate(make_profile("500000"), make_inputs(), as_of=PERIOD_START)

        with pytest.raises(StateError):
            entry.attach_result(other)
        assert entry.result.net_pay == Decimal("91750.00")


class TestCancel:
    @pytest.mark.parametrize("steps", [0, 1, 2])
    def test_cancel_from_open_states(self, entry, engine, steps):
        if steps >= 1:
            calculated(entry, engine)
        if steps >= 2:
            entry.approve()

        entry.cancel("employee left")

        assert entry.status == PayrollEntryStatus.CANCELLED
        assert entry.cancel_reason == "employee left"
        assert entry.cancelled_at is not None

    def test_cannot_cancel_paid(self, entry, engine):
        calculated(entry, engine)
        entry.approve()
        entry.mark_paid()

        with pytest.raises(StateError):
            entry.cancel()
        assert entry.status == PayrollEntryStatus.PAID

    def test_cancelled_is_terminal(self, entry):
        entry.cancel()
        with pytest.raises(StateError):
            entry.cancel()
        with pytest.raises(StateError):
            entry.approve()


class TestSnapshot:
    def test_snapshot(self, entry, engine):
        calculated(entry, engine)
        snap = entry.snapshot()

        assert snap["status"] == "calculated"
        assert snap["payroll_number"] == "PR-202401-EMP001"
        assert snap["result"]["net_pay"] == "91750.00"
        assert snap["calculation_id"] == str(entry.result.calculation_id)
        assert snap["is_paid"] is False

    def test_draft_snapshot_has_no_result(self, entry):
        snap = entry.snapshot()
        assert snap["result"] is None
        assert snap["calculation_id"] is None
