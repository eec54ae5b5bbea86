"""Payslip line items derived from a calculation result."""

from __future__ import annotations

from decimal import Decimal

from jm_payroll.calculators.types import (
    ZERO,
    LineType,
    PayLine,
    PayrollCalculationResult,
    round_money,
)


class LineItemBuilder:
    """Builds payslip lines from a PayrollCalculationResult.

    Lines are a presentation of the result, never a second calculation.

    Sign conventions:
    - EARNING: positive
    - TAX (employee statutory): negative
    - DEDUCTION (employee, non-statutory): negative
    - EMPLOYER_TAX: positive (liability, excluded from net)
    """

    @staticmethod
    def build_lines(result: PayrollCalculationResult) -> list[PayLine]:
        """Build lines in stable payslip order, omitting zero items."""
        lines: list[PayLine] = []
        earnings = result.earnings

        if earnings is not None:
            lines.append(
                PayLine(LineType.EARNING, "BASIC", "Basic Salary", earnings.base_salary)
            )
            if earnings.overtime > 0:
                lines.append(
                    PayLine(
                        LineType.EARNING,
                        "OT",
                        f"Overtime ({earnings.overtime_hours} hrs)",
                        earnings.overtime,
                        quantity=earnings.overtime_hours,
                        rate=earnings.hourly_rate,
                    )
                )
            for code, description, amount in (
                ("ALLOW", "Allowances", earnings.allowances),
                ("BONUS", "Bonus", earnings.bonus),
                ("COMM", "Commission", earnings.commission),
            ):
                if amount > 0:
                    lines.append(PayLine(LineType.EARNING, code, description, amount))

            # Component rounding can differ from rounded gross by a cent
            drift = result.gross_earnings - LineItemBuilder.calculate_gross_from_lines(lines)
            if drift != 0:
                lines.append(PayLine(LineType.EARNING, "ROUND", "Rounding adjustment", drift))
        else:
            lines.append(
                PayLine(LineType.EARNING, "GROSS", "Gross Earnings", result.gross_earnings)
            )

        for code, description, amount in (
            ("PAYE", "PAYE Income Tax", result.income_tax),
            ("NIS", "NIS Contribution", result.contribution),
            ("EDTAX", "Education Tax", result.education_levy),
            ("HEART", "HEART/NTA Levy", result.training_levy),
        ):
            if amount > 0:
                lines.append(PayLine(LineType.TAX, code, description, -amount))

        if result.other_deductions > 0:
            lines.append(
                PayLine(LineType.DEDUCTION, "OTHER", "Other Deductions", -result.other_deductions)
            )

        if result.employer_contribution > 0:
            lines.append(
                PayLine(
                    LineType.EMPLOYER_TAX,
                    "NIS_ER",
                    "NIS Contribution (Employer)",
                    result.employer_contribution,
                )
            )

        return lines

    @staticmethod
    def calculate_net_from_lines(lines: list[PayLine]) -> Decimal:
        """NET = Σ(EARNING) + Σ(TAX) + Σ(DEDUCTION); EMPLOYER_TAX excluded."""
        net = ZERO
        for line in lines:
            if line.line_type != LineType.EMPLOYER_TAX:
                net += line.amount
        return round_money(net)

    @staticmethod
    def calculate_gross_from_lines(lines: list[PayLine]) -> Decimal:
        """GROSS = Σ(EARNING)."""
        gross = ZERO
        for line in lines:
            if line.line_type == LineType.EARNING:
                gross += line.amount
        return round_money(gross)

    @staticmethod
    def validate_line_signs(lines: list[PayLine]) -> list[str]:
        """Validate that all line items have correct signs.

        Returns list of error messages (empty if all valid).
        """
        errors: list[str] = []

        for i, line in enumerate(lines):
            if line.code == "ROUND":
                continue
            if line.line_type in (LineType.EARNING, LineType.EMPLOYER_TAX):
                if line.amount < 0:
                    errors.append(
                        f"Line {i} ({line.line_type.value}) has negative amount {line.amount}, expected positive"
                    )
            elif line.amount > 0:
                errors.append(
                    f"Line {i} ({line.line_type.value}) has positive amount {line.amount}, expected negative"
                )

        return errors

    @staticmethod
    def sum_by_type(lines: list[PayLine]) -> dict[LineType, Decimal]:
        """Sum line amounts by type."""
        totals: dict[LineType, Decimal] = {lt: ZERO for lt in LineType}
        for line in lines:
            totals[line.line_type] += line.amount
        return totals
