"""Payroll gross-to-net calculation engine."""

from jm_payroll.calculators.earnings import EarningsAssembler, assemble_earnings
from jm_payroll.calculators.engine import (
    BatchCalculationResult,
    EmployeeCalculationRequest,
    PayrollEngine,
)
from jm_payroll.calculators.line_builder import LineItemBuilder
from jm_payroll.calculators.net_pay import NetPayAssembler, assemble_net
from jm_payroll.calculators.rate_table import (
    JAMAICA_2024,
    RateTableRegistry,
    StatutoryRateTable,
)
from jm_payroll.calculators.tax_calculator import (
    StatutoryDeductionCalculator,
    calculate_deductions,
)

__all__ = [
    "BatchCalculationResult",
    "EarningsAssembler",
    "EmployeeCalculationRequest",
    "JAMAICA_2024",
    "LineItemBuilder",
    "NetPayAssembler",
    "PayrollEngine",
    "RateTableRegistry",
    "StatutoryDeductionCalculator",
    "StatutoryRateTable",
    "assemble_earnings",
    "assemble_net",
    "calculate_deductions",
]
