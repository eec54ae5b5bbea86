"""Payroll entry lifecycle and reporting services."""

from jm_payroll.services.payroll_entry import PayrollEntry, make_payroll_number
from jm_payroll.services.state_machine import (
    InvalidTransitionError,
    PayrollEntryStateMachine,
    PayrollEntryStatus,
)
from jm_payroll.services.summary import PeriodSummary, summarize_entries, summarize_period

__all__ = [
    "InvalidTransitionError",
    "PayrollEntry",
    "PayrollEntryStateMachine",
    "PayrollEntryStatus",
    "PeriodSummary",
    "make_payroll_number",
    "summarize_entries",
    "summarize_period",
]
