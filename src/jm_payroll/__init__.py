"""Jamaica payroll gross-to-net engine."""

__version__ = "0.1.0"
