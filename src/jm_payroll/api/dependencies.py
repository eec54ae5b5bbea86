"""FastAPI dependencies for dependency injection."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from jm_payroll.calculators.engine import PayrollEngine


@lru_cache(maxsize=1)
def get_engine() -> PayrollEngine:
    """Get the process-wide engine (rate tables are loaded once)."""
    return PayrollEngine()


# Type aliases for cleaner dependency injection
Engine = Annotated[PayrollEngine, Depends(get_engine)]
