"""Tests for payroll item builder."""

from decimal import Decimal
from uuid import uuid4

from hr_compliance.calculators.item_builder import PayrollItemBuilder, round_to_halalas
from hr_compliance.calculators.types import SalaryComponents


def build(**overrides):
    defaults = dict(
        employee_id=uuid4(),
        salary=SalaryComponents(
            basic_salary=Decimal("5000"),
            housing_allowance=Decimal("1250"),
            transportation_allowance=Decimal("500"),
        ),
        gosi_employee=Decimal("625.00"),
        gosi_employer=Decimal("750.00"),
    )
    defaults.update(overrides)
    return PayrollItemBuilder.create_item(**defaults)


class TestRounding:
    """Test rounding to halalas."""

    def test_half_up(self):
        assert round_to_halalas(Decimal("10.125")) == Decimal("10.13")
        assert round_to_halalas(Decimal("10.124")) == Decimal("10.12")
        assert round_to_halalas(Decimal("10.135")) == Decimal("10.14")


class TestPayrollItemBuilder:
    """Test item construction and validation."""

    def test_totals(self):
        item = build(loan_deduction=Decimal("300"), advance_deduction=Decimal("200"))

        assert item.total_earnings == Decimal("6750.00")
        assert item.total_deductions == Decimal("1125.00")
        assert item.net_salary == Decimal("5625.00")
        assert item.net_salary == item.total_earnings - item.total_deductions

    def test_components_rounded_before_totals(self):
        """Net is exact even with sub-halala inputs."""
        item = build(
            salary=SalaryComponents(
                basic_salary=Decimal("3333.335"),
                housing_allowance=Decimal("833.334"),
            ),
            gosi_employee=Decimal("416.6669"),
        )

        assert item.basic_salary == Decimal("3333.34")
        assert item.housing_allowance == Decimal("833.33")
        assert item.net_salary == item.total_earnings - item.total_deductions
        assert PayrollItemBuilder.validate_item(item) == []

    def test_deductions_forced_positive(self):
        item = build(loan_deduction=Decimal("-300"))
        assert item.loan_deduction == Decimal("300.00")

    def test_employer_share_not_deducted(self):
        item = build()
        assert item.total_deductions == Decimal("625.00")

    def test_hash_is_deterministic(self):
        employee_id = uuid4()
        first = build(employee_id=employee_id)
        second = build(employee_id=employee_id)

        assert first.item_hash == second.item_hash
        assert len(first.item_hash) == 32

    def test_hash_changes_with_amounts(self):
        employee_id = uuid4()
        first = build(employee_id=employee_id)
        second = build(employee_id=employee_id, loan_deduction=Decimal("1"))
        assert first.item_hash != second.item_hash

    def test_validate_detects_tampering(self):
        item = build()
        item.net_salary += Decimal("0.01")

        errors = PayrollItemBuilder.validate_item(item)
        assert len(errors) == 1
        assert "net_salary" in errors[0]

    def test_sum_items(self):
        items = [build(), build(loan_deduction=Decimal("100"))]
        totals = PayrollItemBuilder.sum_items(items)

        assert totals.total_employees == 2
        assert totals.total_gross == Decimal("13500.00")
        assert totals.total_deductions == Decimal("1350.00")
        assert totals.total_net == Decimal("12150.00")
        assert totals.total_gosi_employer == Decimal("1500.00")
