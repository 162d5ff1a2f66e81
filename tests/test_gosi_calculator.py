"""Tests for GOSI contribution calculation."""

from decimal import Decimal
from uuid import uuid4

from hr_compliance.calculators.gosi_calculator import (
    GOSI_WAGE_CAP,
    EmployeeContribution,
    GOSICalculator,
    summarize_contributions,
)


class TestGOSICalculator:
    """Test contribution rates and the wage cap."""

    def test_saudi_employee(self):
        """Saudi: 10% employee, 12% employer on basic + housing."""
        result = GOSICalculator.calculate(Decimal("5000"), Decimal("2000"), is_saudi=True)

        assert result.wage_base == Decimal("7000")
        assert result.employee == Decimal("700.00")
        assert result.employer == Decimal("840.00")
        assert result.total == Decimal("1540.00")

    def test_non_saudi_employee(self):
        """Non-Saudi: employer-only 2%."""
        result = GOSICalculator.calculate(Decimal("6000"), Decimal("1000"), is_saudi=False)

        assert result.employee == Decimal("0.00")
        assert result.employer == Decimal("140.00")

    def test_wage_base_capped(self):
        """Contributions never derive from more than 45,000."""
        result = GOSICalculator.calculate(Decimal("60000"), Decimal("15000"), is_saudi=True)

        assert result.wage_base == GOSI_WAGE_CAP
        assert result.employee == Decimal("4500.00")
        assert result.employer == Decimal("5400.00")

    def test_exactly_at_cap(self):
        result = GOSICalculator.calculate(Decimal("40000"), Decimal("5000"), is_saudi=False)
        assert result.wage_base == Decimal("45000")
        assert result.employer == Decimal("900.00")

    def test_half_up_rounding(self):
        """0.10 * 1234.55 = 123.455 rounds up to 123.46."""
        result = GOSICalculator.calculate(Decimal("1234.55"), Decimal("0"), is_saudi=True)
        assert result.employee == Decimal("123.46")

    def test_zero_salary(self):
        result = GOSICalculator.calculate(Decimal("0"), Decimal("0"), is_saudi=True)
        assert result.employee == Decimal("0.00")
        assert result.employer == Decimal("0.00")

    def test_transport_not_in_wage_base(self):
        """Only basic and housing are contributory."""
        assert GOSICalculator.wage_base(Decimal("3000"), Decimal("750")) == Decimal("3750")


class TestContributionSummary:
    """Test monthly summary rollups."""

    def test_split_by_nationality(self):
        lines = [
            EmployeeContribution(uuid4(), True, Decimal("700.00"), Decimal("840.00")),
            EmployeeContribution(uuid4(), True, Decimal("300.00"), Decimal("360.00")),
            EmployeeContribution(uuid4(), False, Decimal("0.00"), Decimal("140.00")),
        ]

        summary = summarize_contributions("2025-01", lines)

        assert summary.month == "2025-01"
        assert summary.total_employee == Decimal("1000.00")
        assert summary.total_employer == Decimal("1340.00")
        assert summary.saudi_total == Decimal("2200.00")
        assert summary.non_saudi_total == Decimal("140.00")
        assert summary.grand_total == Decimal("2340.00")

    def test_empty_month(self):
        summary = summarize_contributions("2025-02", [])
        assert summary.grand_total == Decimal("0")
        assert summary.lines == []
