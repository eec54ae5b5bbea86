"""Payroll calculation endpoints."""

from datetime import date

from fastapi import APIRouter, status

from jm_payroll.api.dependencies import Engine
from jm_payroll.api.schemas import (
    BatchErrorOut,
    BatchRequest,
    BatchResponse,
    CalculationRequest,
    CalculationResponse,
    CalculationResultOut,
    ErrorResponse,
    PayLineOut,
    SummaryRequest,
    SummaryResponse,
)
from jm_payroll.calculators.engine import EmployeeCalculationRequest, PayrollEngine
from jm_payroll.calculators.line_builder import LineItemBuilder
from jm_payroll.calculators.rate_table import StatutoryRateTable
from jm_payroll.services.summary import summarize_period

router = APIRouter(prefix="/payroll", tags=["payroll"])

ERROR_RESPONSES = {
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _select_table(
    engine: PayrollEngine, version: str | None, as_of: date | None
) -> StatutoryRateTable:
    if version:
        return engine.registry.get(version)
    return engine.resolve_rate_table(as_of)


@router.post(
    "/calculate",
    response_model=CalculationResponse,
    status_code=status.HTTP_200_OK,
    responses=ERROR_RESPONSES,
)
def calculate(engine: Engine, payload: CalculationRequest) -> CalculationResponse:
    """Calculate gross-to-net for one employee and return payslip lines."""
    table = _select_table(engine, payload.rate_table_version, payload.as_of)
    result = engine.calculate(
        payload.profile.to_domain(), payload.inputs.to_domain(), rate_table=table
    )
    lines = LineItemBuilder.build_lines(result)

    return CalculationResponse(
        result=CalculationResultOut.model_validate(result),
        lines=[
            PayLineOut(
                line_type=line.line_type.value,
                code=line.code,
                description=line.description,
                amount=line.amount,
                quantity=line.quantity,
                rate=line.rate,
            )
            for line in lines
        ],
    )


@router.post(
    "/batch",
    response_model=BatchResponse,
    status_code=status.HTTP_200_OK,
    responses=ERROR_RESPONSES,
)
def calculate_batch(engine: Engine, payload: BatchRequest) -> BatchResponse:
    """Calculate a period for many employees against one rate table."""
    table = _select_table(engine, payload.rate_table_version, payload.as_of)
    batch = engine.calculate_batch(
        [
            EmployeeCalculationRequest(
                key=item.key,
                profile=item.profile.to_domain(),
                inputs=item.inputs.to_domain(),
            )
            for item in payload.items
        ],
        rate_table=table,
    )

    return BatchResponse(
        rate_table_version=batch.rate_table_version,
        results={
            key: CalculationResultOut.model_validate(result)
            for key, result in batch.results.items()
        },
        errors={
            key: BatchErrorOut(detail=err.message, code=err.code, context=err.context)
            for key, err in batch.errors.items()
        },
        error_count=batch.error_count,
    )


@router.post(
    "/summary",
    response_model=SummaryResponse,
    status_code=status.HTTP_200_OK,
    responses=ERROR_RESPONSES,
)
async def summarize(payload: SummaryRequest) -> SummaryResponse:
    """Aggregate already-computed results for a period."""
    summary = summarize_period(payload.period, (r.to_domain() for r in payload.results))
    return SummaryResponse.model_validate(summary)
