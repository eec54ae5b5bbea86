"""Pydantic schemas for API request/response models."""

from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from jm_payroll.calculators.types import (
    CompensationProfile,
    PayFrequency,
    PayrollCalculationResult,
    PeriodInputs,
)


# ============================================================================
# Input schemas
# ============================================================================


class CompensationProfileIn(BaseModel):
    """Employee compensation terms."""

    employee_id: str | None = None
    base_salary: Decimal
    pay_frequency: PayFrequency = PayFrequency.MONTHLY
    overtime_eligible: bool = True
    overtime_multiplier: Decimal = Decimal("1.5")
    currency: str = "JMD"

    def to_domain(self) -> CompensationProfile:
        return CompensationProfile(
            employee_id=self.employee_id,
            base_salary=self.base_salary,
            pay_frequency=self.pay_frequency,
            overtime_eligible=self.overtime_eligible,
            overtime_multiplier=self.overtime_multiplier,
            currency=self.currency,
        )


class PeriodInputsIn(BaseModel):
    """Variable inputs for the period.

    Range checks are left to the engine so errors name the field the same
    way for library and API callers.
    """

    overtime_hours: Decimal = Decimal("0")
    allowances: Decimal = Decimal("0")
    bonus: Decimal = Decimal("0")
    commission: Decimal = Decimal("0")
    other_deductions: Decimal = Decimal("0")

    def to_domain(self) -> PeriodInputs:
        return PeriodInputs(
            overtime_hours=self.overtime_hours,
            allowances=self.allowances,
            bonus=self.bonus,
            commission=self.commission,
            other_deductions=self.other_deductions,
        )


class CalculationRequest(BaseModel):
    """Schema for a single-employee calculation."""

    profile: CompensationProfileIn
    inputs: PeriodInputsIn = Field(default_factory=PeriodInputsIn)
    as_of: date | None = None
    rate_table_version: str | None = None


class BatchItem(BaseModel):
    """One employee within a batch request."""

    key: str
    profile: CompensationProfileIn
    inputs: PeriodInputsIn = Field(default_factory=PeriodInputsIn)


class BatchRequest(BaseModel):
    """Schema for a batch calculation over one period."""

    items: list[BatchItem]
    as_of: date | None = None
    rate_table_version: str | None = None


# ============================================================================
# Result schemas
# ============================================================================


class PayLineOut(BaseModel):
    """Schema for a payslip line."""

    line_type: str
    code: str
    description: str
    amount: Decimal
    quantity: Decimal | None = None
    rate: Decimal | None = None


class CalculationResultOut(BaseModel):
    """Schema for a gross-to-net result."""

    model_config = ConfigDict(from_attributes=True)

    calculation_id: UUID | None = None
    rate_table_version: str | None = None
    currency: str
    gross_earnings: Decimal
    income_tax: Decimal
    contribution: Decimal
    education_levy: Decimal
    training_levy: Decimal
    other_deductions: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    is_net_negative: bool
    employer_contribution: Decimal

    def to_domain(self) -> PayrollCalculationResult:
        return PayrollCalculationResult(
            gross_earnings=self.gross_earnings,
            income_tax=self.income_tax,
            contribution=self.contribution,
            education_levy=self.education_levy,
            training_levy=self.training_levy,
            other_deductions=self.other_deductions,
            total_deductions=self.total_deductions,
            net_pay=self.net_pay,
            is_net_negative=self.is_net_negative,
            employer_contribution=self.employer_contribution,
            rate_table_version=self.rate_table_version,
            currency=self.currency,
            calculation_id=self.calculation_id,
        )


class CalculationResponse(BaseModel):
    """Schema for calculation response."""

    result: CalculationResultOut
    lines: list[PayLineOut]


class BatchErrorOut(BaseModel):
    """Schema for a per-employee batch failure."""

    detail: str
    code: str
    context: dict[str, Any] | None = None


class BatchResponse(BaseModel):
    """Schema for batch calculation response."""

    rate_table_version: str
    results: dict[str, CalculationResultOut]
    errors: dict[str, BatchErrorOut]
    error_count: int


# ============================================================================
# Summary schemas
# ============================================================================


class SummaryRequest(BaseModel):
    """Schema for aggregating previously computed results."""

    period: str
    results: list[CalculationResultOut]


class SummaryResponse(BaseModel):
    """Schema for a period summary."""

    model_config = ConfigDict(from_attributes=True)

    period: str
    employee_count: int
    total_gross: Decimal
    total_deductions: Decimal
    total_net: Decimal
    average_gross: Decimal
    total_income_tax: Decimal
    total_contribution: Decimal
    total_education_levy: Decimal
    total_training_levy: Decimal
    total_other_deductions: Decimal
    total_employer_contribution: Decimal
    negative_net_count: int


# ============================================================================
# Rate table schemas
# ============================================================================


class TaxBracketOut(BaseModel):
    """Schema for an income tax bracket."""

    min: Decimal
    rate: Decimal


class RateTableResponse(BaseModel):
    """Schema for a statutory rate table."""

    version: str
    effective_start: date
    effective_end: date | None = None
    currency: str
    threshold: Decimal
    brackets: list[TaxBracketOut]
    contribution_rate: Decimal
    contribution_monthly_cap: Decimal
    employer_contribution_rate: Decimal
    education_levy_rate: Decimal
    training_levy_rate: Decimal


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
    context: dict[str, Any] | None = None
