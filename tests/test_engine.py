"""Unit tests for PayrollEngine.

End-to-end gross-to-net scenarios, deterministic calculation ids and
batch orchestration.
"""

import threading
from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from jm_payroll.calculators.engine import EmployeeCalculationRequest, PayrollEngine
from jm_payroll.calculators.rate_table import (
    JAMAICA_2024,
    RateTableNotFoundError,
    RateTableRegistry,
)
from jm_payroll.errors import PayrollError, ValidationError

from tests.conftest import make_inputs, make_profile


class TestScenarios:
    """Known-answer scenarios on the 2024 table."""

    def test_salary_below_threshold(self, engine, rate_table):
        result = engine.calculate(make_profile("100000"), make_inputs(), rate_table)

        assert result.gross_earnings == Decimal("100000.00")
        assert result.income_tax == Decimal("0.00")
        assert result.contribution == Decimal("3000.00")
        assert result.education_levy == Decimal("2250.00")
        assert result.training_levy == Decimal("3000.00")
        assert result.total_deductions == Decimal("8250.00")
        assert result.net_pay == Decimal("91750.00")
        assert result.is_net_negative is False

    def test_salary_at_upper_boundary(self, engine, rate_table):
        result = engine.calculate(make_profile("500000"), make_inputs(), rate_table)

        assert result.gross_earnings == Decimal("500000.00")
        assert result.income_tax == Decimal("93750.00")
        assert result.contribution == Decimal("13000.00")
        assert result.education_levy == Decimal("11250.00")
        assert result.training_levy == Decimal("15000.00")
        assert result.total_deductions == Decimal("133000.00")
        assert result.net_pay == Decimal("367000.00")

    def test_ineligible_overtime_contributes_nothing(self, engine, rate_table):
        profile = make_profile("100000", overtime_eligible=False)
        with_hours = engine.calculate(profile, make_inputs(overtime_hours="20"), rate_table)
        without = engine.calculate(profile, make_inputs(), rate_table)

        assert with_hours.gross_earnings == Decimal("100000.00")
        assert with_hours.earnings.overtime == Decimal("0.00")
        assert with_hours.net_pay == without.net_pay

    def test_overtime_inflated_gross_still_capped(self, engine, rate_table):
        # 400000 / 160 = 2500/hr; 20 hrs * 1.5 = 75000 -> gross 475000
        result = engine.calculate(
            make_profile("400000"), make_inputs(overtime_hours="20"), rate_table
        )
        assert result.gross_earnings == Decimal("475000.00")
        assert result.contribution == Decimal("13000.00")

    def test_other_deductions_and_negative_net(self, engine, rate_table):
        result = engine.calculate(
            make_profile("10000"), make_inputs(other_deductions="20000"), rate_table
        )
        assert result.other_deductions == Decimal("20000.00")
        assert result.net_pay == Decimal("-10825.00")
        assert result.is_net_negative is True

    def test_result_carries_provenance(self, engine, rate_table):
        result = engine.calculate(make_profile("100000"), make_inputs(), rate_table)

        assert result.rate_table_version == "JM-2024"
        assert result.currency == "JMD"
        assert result.employer_contribution == Decimal("2500.00")
        assert result.calculation_id is not None

    def test_resolves_table_by_date(self, engine):
        result = engine.calculate(make_profile("100000"), make_inputs(), as_of=date(2024, 3, 31))
        assert result.rate_table_version == "JM-2024"

    def test_no_table_for_date(self, engine):
        with pytest.raises(RateTableNotFoundError):
            engine.calculate(make_profile("100000"), make_inputs(), as_of=date(2019, 1, 31))

    def test_currency_mismatch_rejected(self, engine, rate_table):
        with pytest.raises(ValidationError) as exc_info:
            engine.calculate(make_profile("100000", currency="USD"), make_inputs(), rate_table)
        assert exc_info.value.field == "currency"

    def test_non_finite_input_is_a_validation_error(self, engine, rate_table):
        with pytest.raises(ValidationError) as exc_info:
            engine.calculate(make_profile("100000"), make_inputs(bonus="Infinity"), rate_table)
        assert exc_info.value.field == "bonus"


class TestCalculationIdGeneration:
    """Test deterministic calculation ID generation."""

    def test_same_inputs_produce_identical_results(self, engine, rate_table):
        profile = make_profile("275432.19", employee_id="EMP001")
        inputs = make_inputs(overtime_hours="7.5", bonus="1234.56", other_deductions="50")

        first = engine.calculate(profile, inputs, rate_table)
        second = engine.calculate(profile, inputs, rate_table)

        assert first == second
        assert repr(first) == repr(second)

    def test_different_inputs_produce_different_id(self, engine, rate_table):
        profile = make_profile("100000")
        id1 = engine.calculate(profile, make_inputs(bonus="1"), rate_table).calculation_id
        id2 = engine.calculate(profile, make_inputs(bonus="2"), rate_table).calculation_id
        assert id1 != id2

    def test_rate_table_version_affects_id(self, engine, rate_table):
        other = replace(rate_table, version="JM-2024-rev1")
        profile = make_profile("100000")

        id1 = engine.calculate(profile, make_inputs(), rate_table).calculation_id
        id2 = engine.calculate(profile, make_inputs(), other).calculation_id
        assert id1 != id2

    def test_rate_table_contents_affect_id(self, engine, rate_table):
        # Same version string, different cap
        edited = replace(rate_table, contribution_monthly_cap=Decimal("12000"))
        profile = make_profile("100000")

        id1 = engine.calculate(profile, make_inputs(), rate_table).calculation_id
        id2 = engine.calculate(profile, make_inputs(), edited).calculation_id
        assert id1 != id2

    def test_engine_version_affects_id(self, settings, rate_table):
        registry = RateTableRegistry([JAMAICA_2024])
        engine1 = PayrollEngine(registry, settings)
        engine2 = PayrollEngine(registry, replace(settings, engine_version="2.0.0"))
        profile = make_profile("100000")

        id1 = engine1.calculate(profile, make_inputs(), rate_table).calculation_id
        id2 = engine2.calculate(profile, make_inputs(), rate_table).calculation_id
        assert id1 != id2


class TestBatch:
    """Test batch orchestration over one rate table snapshot."""

    def _requests(self):
        return [
            EmployeeCalculationRequest("EMP001", make_profile("100000"), make_inputs()),
            EmployeeCalculationRequest("EMP002", make_profile("500000"), make_inputs()),
            EmployeeCalculationRequest("EMP003", make_profile("200000"), make_inputs(bonus="-5")),
        ]

    def test_batch_collects_results_and_errors(self, engine, rate_table):
        batch = engine.calculate_batch(self._requests(), rate_table=rate_table)

        assert batch.rate_table_version == "JM-2024"
        assert set(batch.results) == {"EMP001", "EMP002"}
        assert batch.results["EMP001"].net_pay == Decimal("91750.00")
        assert batch.results["EMP002"].net_pay == Decimal("367000.00")
        assert batch.error_count == 1
        assert batch.errors["EMP003"].field == "bonus"
        assert batch.success is False

    def test_batch_matches_single_calculation(self, engine, rate_table):
        requests = self._requests()[:2]
        batch = engine.calculate_batch(requests, rate_table=rate_table)

        for request in requests:
            single = engine.calculate(request.profile, request.inputs, rate_table)
            assert batch.results[request.key] == single

    def test_cancelled_batch_starts_nothing(self, engine, rate_table):
        cancel = threading.Event()
        cancel.set()

        batch = engine.calculate_batch(self._requests(), rate_table=rate_table, cancel_event=cancel)

        assert batch.results == {}
        assert sorted(batch.cancelled) == ["EMP001", "EMP002", "EMP003"]
        assert batch.success is False

    def test_duplicate_keys_rejected(self, engine, rate_table):
        requests = self._requests()
        requests.append(requests[0])
        with pytest.raises(ValidationError):
            engine.calculate_batch(requests, rate_table=rate_table)

    def test_empty_batch(self, engine, rate_table):
        batch = engine.calculate_batch([], rate_table=rate_table)
        assert batch.results == {}
        assert batch.success is True

    def test_unexpected_error_is_captured_per_employee(self, engine, rate_table, monkeypatch):
        calculate = engine.calculate

        def flaky(profile, inputs, rate_table=None, as_of=None):
            if profile.employee_id == "EMP002":
                raise ArithmeticError("overflow")
            return calculate(profile, inputs, rate_table=rate_table, as_of=as_of)

        monkeypatch.setattr(engine, "calculate", flaky)
        requests = [
            EmployeeCalculationRequest(
                "EMP001", make_profile("100000", employee_id="EMP001"), make_inputs()
            ),
            EmployeeCalculationRequest(
                "EMP002", make_profile("100000", employee_id="EMP002"), make_inputs()
            ),
        ]

        batch = engine.calculate_batch(requests, rate_table=rate_table)

        assert batch.results["EMP001"].net_pay == Decimal("91750.00")
        assert set(batch.errors) == {"EMP002"}
        assert isinstance(batch.errors["EMP002"], PayrollError)
        assert "overflow" in batch.errors["EMP002"].message
        assert batch.errors["EMP002"].context["error_type"] == "ArithmeticError"

    def test_non_finite_input_fails_only_that_employee(self, engine, rate_table):
        requests = [
            EmployeeCalculationRequest("EMP001", make_profile("100000"), make_inputs()),
            EmployeeCalculationRequest(
                "EMP002", make_profile("100000"), make_inputs(bonus="Infinity")
            ),
        ]

        batch = engine.calculate_batch(requests, rate_table=rate_table)

        assert batch.results["EMP001"].net_pay == Decimal("91750.00")
        assert batch.errors["EMP002"].field == "bonus"
