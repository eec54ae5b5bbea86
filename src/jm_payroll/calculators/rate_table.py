"""Statutory rate tables: versioned, effective-dated configuration data.

Rate table payloads are JSON documents with structure:
{
    "version": "JM-2024",
    "effective_start": "2024-01-01",
    "effective_end": null,
    "currency": "JMD",
    "brackets": [
        {"min": 0, "rate": 0},
        {"min": 1500000, "rate": 0.25},
        {"min": 6000000, "rate": 0.30}
    ],
    "contribution": {"rate": 0.03, "monthly_cap": 13000, "employer_rate": 0.025},
    "levies": {"education": 0.0225, "training": 0.03}
}

Bracket bounds are annual amounts; the contribution cap is per month.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from jm_payroll.calculators.types import TaxBracket
from jm_payroll.errors import ConfigurationError

logger = logging.getLogger(__name__)

ONE = Decimal("1")
ZERO = Decimal("0")


@dataclass(frozen=True)
class StatutoryRateTable:
    """Statutory constants effective for a date range.

    Validated on construction, so a table that exists is well formed.
    """

    version: str
    effective_start: date
    brackets: tuple[TaxBracket, ...]
    contribution_rate: Decimal
    contribution_monthly_cap: Decimal
    education_levy_rate: Decimal
    training_levy_rate: Decimal
    employer_contribution_rate: Decimal = ZERO
    effective_end: date | None = None  # None = open-ended
    currency: str = "JMD"

    def __post_init__(self) -> None:
        # Accept lists from callers but store an immutable tuple
        object.__setattr__(self, "brackets", tuple(self.brackets))
        self.validate()

    def validate(self) -> None:
        """Check the structural invariants, raising ConfigurationError."""
        if not self.brackets:
            raise ConfigurationError("at least one bracket is required", "brackets", self.version)

        first = self.brackets[0]
        if first.lower_annual_bound != ZERO:
            raise ConfigurationError(
                f"first bracket must start at 0, got {first.lower_annual_bound}",
                "brackets[0].min",
                self.version,
            )
        if first.rate != ZERO:
            raise ConfigurationError(
                f"first bracket is the tax-free band and must have rate 0, got {first.rate}",
                "brackets[0].rate",
                self.version,
            )

        for i, bracket in enumerate(self.brackets):
            if not ZERO <= bracket.rate <= ONE:
                raise ConfigurationError(
                    f"rate {bracket.rate} outside [0, 1]", f"brackets[{i}].rate", self.version
                )
            if i == 0:
                continue
            prev = self.brackets[i - 1]
            if bracket.lower_annual_bound <= prev.lower_annual_bound:
                raise ConfigurationError(
                    f"bounds must be strictly increasing "
                    f"({prev.lower_annual_bound} then {bracket.lower_annual_bound})",
                    f"brackets[{i}].min",
                    self.version,
                )
            if bracket.rate < prev.rate:
                raise ConfigurationError(
                    f"rates must be non-decreasing ({prev.rate} then {bracket.rate})",
                    f"brackets[{i}].rate",
                    self.version,
                )

        for name in (
            "contribution_rate",
            "education_levy_rate",
            "training_levy_rate",
            "employer_contribution_rate",
        ):
            value = getattr(self, name)
            if not ZERO <= value <= ONE:
                raise ConfigurationError(f"rate {value} outside [0, 1]", name, self.version)

        if self.contribution_monthly_cap < ZERO:
            raise ConfigurationError(
                f"cap must be non-negative, got {self.contribution_monthly_cap}",
                "contribution_monthly_cap",
                self.version,
            )

        if self.effective_end is not None and self.effective_end < self.effective_start:
            raise ConfigurationError(
                f"effective_end {self.effective_end} precedes effective_start {self.effective_start}",
                "effective_end",
                self.version,
            )

    @property
    def threshold(self) -> Decimal:
        """Annual tax-free threshold (upper edge of the zero-rate band)."""
        if len(self.brackets) < 2:
            return ZERO
        return self.brackets[1].lower_annual_bound

    def covers(self, as_of: date) -> bool:
        """Check if this table is effective on a date."""
        if as_of < self.effective_start:
            return False
        return self.effective_end is None or as_of <= self.effective_end

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> StatutoryRateTable:
        """Build a table from a JSON payload, validating on the way."""
        version = str(payload.get("version", ""))
        if not version:
            raise ConfigurationError("version is required", "version")

        try:
            brackets = [
                TaxBracket(
                    lower_annual_bound=Decimal(str(b["min"])),
                    rate=Decimal(str(b["rate"])),
                )
                for b in payload.get("brackets", [])
            ]
            contribution = payload.get("contribution", {})
            levies = payload.get("levies", {})
            return cls(
                version=version,
                effective_start=date.fromisoformat(payload["effective_start"]),
                effective_end=(
                    date.fromisoformat(payload["effective_end"])
                    if payload.get("effective_end")
                    else None
                ),
                currency=payload.get("currency", "JMD"),
                brackets=tuple(brackets),
                contribution_rate=Decimal(str(contribution["rate"])),
                contribution_monthly_cap=Decimal(str(contribution["monthly_cap"])),
                employer_contribution_rate=Decimal(str(contribution.get("employer_rate", 0))),
                education_levy_rate=Decimal(str(levies["education"])),
                training_levy_rate=Decimal(str(levies["training"])),
            )
        except KeyError as e:
            raise ConfigurationError(f"missing key {e.args[0]!r}", str(e.args[0]), version) from e
        except (InvalidOperation, ValueError, TypeError) as e:
            raise ConfigurationError(f"malformed value: {e}", version=version) from e

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON payload shape accepted by from_payload."""
        return {
            "version": self.version,
            "effective_start": self.effective_start.isoformat(),
            "effective_end": self.effective_end.isoformat() if self.effective_end else None,
            "currency": self.currency,
            "brackets": [
                {"min": str(b.lower_annual_bound), "rate": str(b.rate)} for b in self.brackets
            ],
            "contribution": {
                "rate": str(self.contribution_rate),
                "monthly_cap": str(self.contribution_monthly_cap),
                "employer_rate": str(self.employer_contribution_rate),
            },
            "levies": {
                "education": str(self.education_levy_rate),
                "training": str(self.training_levy_rate),
            },
        }


class RateTableNotFoundError(ConfigurationError):
    """Raised when no rate table is effective on the requested date."""

    def __init__(self, as_of: date):
        self.as_of = as_of
        super().__init__(f"no rate table effective {as_of}", "effective_start")


class RateTableRegistry:
    """Holds the known rate table versions and resolves them by date.

    Versions must not overlap; a table is expected to change only at an
    effective date, never mid-period.
    """

    def __init__(self, tables: list[StatutoryRateTable] | None = None):
        self._tables: list[StatutoryRateTable] = []
        for table in tables or []:
            self.register(table)

    def register(self, table: StatutoryRateTable) -> None:
        """Add a table version, rejecting duplicates and overlaps."""
        for existing in self._tables:
            if existing.version == table.version:
                raise ConfigurationError("duplicate version", "version", table.version)
            if _overlaps(existing, table):
                raise ConfigurationError(
                    f"effective range overlaps version '{existing.version}'",
                    "effective_start",
                    table.version,
                )
        self._tables.append(table)
        self._tables.sort(key=lambda t: t.effective_start)
        logger.info(
            "Registered rate table %s effective %s to %s",
            table.version,
            table.effective_start,
            table.effective_end or "open",
        )

    def resolve(self, as_of: date) -> StatutoryRateTable:
        """Get the table effective on a date."""
        for table in self._tables:
            if table.covers(as_of):
                return table
        raise RateTableNotFoundError(as_of)

    def get(self, version: str) -> StatutoryRateTable:
        """Get a table by version string."""
        for table in self._tables:
            if table.version == version:
                return table
        raise ConfigurationError("unknown version", "version", version)

    @property
    def tables(self) -> list[StatutoryRateTable]:
        return list(self._tables)

    @classmethod
    def from_file(cls, path: str | Path) -> RateTableRegistry:
        """Load one payload or a list of payloads from a JSON file."""
        with open(path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"invalid JSON in {path}: {e}") from e

        payloads = data if isinstance(data, list) else [data]
        return cls([StatutoryRateTable.from_payload(p) for p in payloads])


def _overlaps(a: StatutoryRateTable, b: StatutoryRateTable) -> bool:
    a_end = a.effective_end or date.max
    b_end = b.effective_end or date.max
    return a.effective_start <= b_end and b.effective_start <= a_end


JAMAICA_2024 = StatutoryRateTable(
    version="JM-2024",
    effective_start=date(2024, 1, 1),
    brackets=(
        TaxBracket(Decimal("0"), Decimal("0")),
        TaxBracket(Decimal("1500000"), Decimal("0.25")),
        TaxBracket(Decimal("6000000"), Decimal("0.30")),
    ),
    contribution_rate=Decimal("0.03"),
    contribution_monthly_cap=Decimal("13000"),
    employer_contribution_rate=Decimal("0.025"),
    education_levy_rate=Decimal("0.0225"),
    training_levy_rate=Decimal("0.03"),
)


def default_registry(path: str | Path | None = None) -> RateTableRegistry:
    """Registry from a JSON file when given, else the built-in Jamaica table."""
    if path:
        return RateTableRegistry.from_file(path)
    return RateTableRegistry([JAMAICA_2024])
