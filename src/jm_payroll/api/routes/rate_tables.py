"""Statutory rate table endpoints."""

from datetime import date

from fastapi import APIRouter, Query

from jm_payroll.api.dependencies import Engine
from jm_payroll.api.schemas import ErrorResponse, RateTableResponse, TaxBracketOut
from jm_payroll.calculators.rate_table import StatutoryRateTable

router = APIRouter(prefix="/rate-tables", tags=["rate-tables"])


def _to_response(table: StatutoryRateTable) -> RateTableResponse:
    return RateTableResponse(
        version=table.version,
        effective_start=table.effective_start,
        effective_end=table.effective_end,
        currency=table.currency,
        threshold=table.threshold,
        brackets=[
            TaxBracketOut(min=b.lower_annual_bound, rate=b.rate) for b in table.brackets
        ],
        contribution_rate=table.contribution_rate,
        contribution_monthly_cap=table.contribution_monthly_cap,
        employer_contribution_rate=table.employer_contribution_rate,
        education_levy_rate=table.education_levy_rate,
        training_levy_rate=table.training_levy_rate,
    )


@router.get("", response_model=list[RateTableResponse])
async def list_rate_tables(engine: Engine) -> list[RateTableResponse]:
    """List registered rate table versions, oldest first."""
    return [_to_response(t) for t in engine.registry.tables]


@router.get(
    "/current",
    response_model=RateTableResponse,
    responses={500: {"model": ErrorResponse}},
)
async def current_rate_table(
    engine: Engine,
    as_of: date | None = Query(default=None),
) -> RateTableResponse:
    """Get the table effective on a date (today by default)."""
    return _to_response(engine.resolve_rate_table(as_of))
