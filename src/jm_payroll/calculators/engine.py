"""Payroll calculation engine - main orchestrator."""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any
from uuid import UUID

from jm_payroll.calculators.earnings import EarningsAssembler
from jm_payroll.calculators.net_pay import NetPayAssembler
from jm_payroll.calculators.rate_table import (
    RateTableRegistry,
    StatutoryRateTable,
    default_registry,
)
from jm_payroll.calculators.tax_calculator import StatutoryDeductionCalculator
from jm_payroll.calculators.types import (
    CompensationProfile,
    PayrollCalculationResult,
    PeriodInputs,
)
from jm_payroll.config import Settings, get_settings
from jm_payroll.errors import PayrollError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmployeeCalculationRequest:
    """One employee's inputs within a batch."""

    key: str
    profile: CompensationProfile
    inputs: PeriodInputs


@dataclass
class BatchCalculationResult:
    """Per-employee outcome of a batch run against one rate table."""

    rate_table_version: str
    results: dict[str, PayrollCalculationResult] = field(default_factory=dict)
    errors: dict[str, PayrollError] = field(default_factory=dict)
    cancelled: list[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def success(self) -> bool:
        return not self.errors and not self.cancelled


class PayrollEngine:
    """Gross-to-net payroll engine.

    Calculation pipeline (stable order per employee):
    1) Validate inputs and assemble gross earnings
    2) Compute statutory deductions from the rate table
    3) Assemble totals and net pay, flagging negative net
    4) Stamp a deterministic calculation id

    The engine holds no mutable state between calls. A batch resolves its
    rate table once and uses that snapshot for every employee.
    """

    def __init__(
        self,
        registry: RateTableRegistry | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.registry = registry or default_registry(self.settings.rate_table_path)
        self.deduction_calculator = StatutoryDeductionCalculator()

    def resolve_rate_table(self, as_of: date | None = None) -> StatutoryRateTable:
        """Get the rate table effective on a date (today by default)."""
        return self.registry.resolve(as_of or date.today())

    def calculate(
        self,
        profile: CompensationProfile,
        inputs: PeriodInputs,
        rate_table: StatutoryRateTable | None = None,
        as_of: date | None = None,
    ) -> PayrollCalculationResult:
        """Calculate gross-to-net for one employee-period.

        Raises:
            ValidationError: If profile or inputs are out of range
            ConfigurationError: If no valid rate table applies
        """
        table = rate_table or self.resolve_rate_table(as_of)
        table.validate()

        if profile.currency != table.currency:
            raise ValidationError(
                "currency",
                profile.currency,
                f"rate table '{table.version}' is denominated in {table.currency}",
            )

        earnings = EarningsAssembler.build(profile, inputs)
        deductions = self.deduction_calculator.calculate_deductions(earnings.gross, table)
        employer_contribution = self.deduction_calculator.employer_contribution(
            earnings.gross, table
        )

        result = NetPayAssembler.assemble_net(
            earnings.gross,
            deductions,
            inputs.other_deductions,
            earnings=earnings,
            employer_contribution=employer_contribution,
            rate_table_version=table.version,
            currency=table.currency,
        )

        calculation_id = self._generate_calculation_id(profile, inputs, table)
        return replace(result, calculation_id=calculation_id)

    def calculate_batch(
        self,
        requests: list[EmployeeCalculationRequest],
        rate_table: StatutoryRateTable | None = None,
        as_of: date | None = None,
        cancel_event: threading.Event | None = None,
        max_workers: int | None = None,
    ) -> BatchCalculationResult:
        """Calculate many employees for one period.

        Failures are captured per employee and do not stop the batch. Setting
        cancel_event stops employees that have not started yet; those already
        running finish normally.
        """
        table = rate_table or self.resolve_rate_table(as_of)
        table.validate()

        keys = [r.key for r in requests]
        if len(set(keys)) != len(keys):
            raise ValidationError("key", keys, "batch keys must be unique")

        batch = BatchCalculationResult(rate_table_version=table.version)
        workers = max_workers or self.settings.batch_max_workers

        def run(request: EmployeeCalculationRequest) -> PayrollCalculationResult | None:
            if cancel_event is not None and cancel_event.is_set():
                return None
            return self.calculate(request.profile, request.inputs, rate_table=table)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [(r.key, pool.submit(run, r)) for r in requests]
            for key, future in futures:
                try:
                    result = future.result()
                except PayrollError as e:
                    logger.warning("Payroll calculation failed for %s: %s", key, e)
                    batch.errors[key] = e
                    continue
                except Exception as e:
                    logger.exception("Unexpected error calculating %s", key)
                    batch.errors[key] = PayrollError(
                        f"Unexpected error: {e}", {"error_type": type(e).__name__}
                    )
                    continue

                if result is None:
                    batch.cancelled.append(key)
                else:
                    batch.results[key] = result

        logger.info(
            "Batch on rate table %s: %d calculated, %d failed, %d cancelled",
            table.version,
            len(batch.results),
            batch.error_count,
            len(batch.cancelled),
        )
        return batch

    def _generate_calculation_id(
        self,
        profile: CompensationProfile,
        inputs: PeriodInputs,
        rate_table: StatutoryRateTable,
    ) -> UUID:
        """Generate deterministic calculation ID.

        Hashes the whole rate table payload, not only its version.
        """
        data: dict[str, Any] = {
            "profile": {
                "employee_id": profile.employee_id,
                "base_salary": str(profile.base_salary),
                "pay_frequency": profile.pay_frequency.value,
                "overtime_eligible": profile.overtime_eligible,
                "overtime_multiplier": str(profile.overtime_multiplier),
                "currency": profile.currency,
            },
            "inputs": inputs.to_canonical_dict(),
            "rate_table": rate_table.to_payload(),
            "engine_version": self.settings.engine_version,
        }
        json_str = json.dumps(data, sort_keys=True)
        hash_bytes = hashlib.sha256(json_str.encode()).digest()
        return UUID(bytes=hash_bytes[:16])
