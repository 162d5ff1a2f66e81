"""Load a demo company into the database.

Usage:
    python -m scripts.load_fixtures [--database-url URL] [--month YYYY-MM]

Creates a ten-person company with salaries, one loan and one advance, then
records a Nitaqat snapshot and a draft payroll batch for the given month.
"""

from __future__ import annotations

import argparse
import asyncio
from datetime import date
from decimal import Decimal

from hr_compliance.config import configure_logging, get_settings
from hr_compliance.database import create_schema, get_engine, make_session_factory
from hr_compliance.models import Advance, Company, Employee, Loan, SalaryRecord
from hr_compliance.services import ComplianceService, PayrollBatchService

# (number, name, is_saudi, basic, housing, transportation, employment_type)
DEMO_EMPLOYEES = [
    ("E001", "Abdullah Al-Harbi", True, "9000", "2250", "800", "permanent"),
    ("E002", "Noura Al-Qahtani", True, "6500", "1625", "600", "permanent"),
    ("E003", "Faisal Al-Dosari", True, "3500", "875", "400", "fixed_term"),
    ("E004", "Rahul Menon", False, "7000", "1750", "600", "permanent"),
    ("E005", "Maria Santos", False, "4200", "1050", "400", "permanent"),
    ("E006", "Ahmed Hassan", False, "5200", "1300", "500", "fixed_term"),
    ("E007", "John Carter", False, "12000", "3000", "1000", "permanent"),
    ("E008", "Imran Sheikh", False, "3800", "950", "400", "permanent"),
    ("E009", "Li Wei", False, "6100", "1525", "500", "permanent"),
    ("E010", "Omar Farouk", False, "4500", "1125", "400", "permanent"),
]


async def load_fixtures(database_url: str, month: str) -> None:
    """Seed a demo company and run the compliance services once."""
    engine = get_engine(database_url)
    factory = make_session_factory(engine)

    try:
        await create_schema(engine)
        async with factory() as session:
            company = Company(name="Demo Trading Co.", sector="retail", entity_size="small")
            session.add(company)
            await session.flush()

            employees = []
            for number, name, is_saudi, basic, housing, transport, kind in DEMO_EMPLOYEES:
                employee = Employee(
                    company_id=company.company_id,
                    employee_number=number,
                    full_name=name,
                    is_saudi=is_saudi,
                    basic_salary=Decimal(basic),
                    hire_date=date(2019, 3, 1),
                    employment_type=kind,
                )
                employee.salary_records.append(
                    SalaryRecord(
                        company_id=company.company_id,
                        basic_salary=Decimal(basic),
                        housing_allowance=Decimal(housing),
                        transportation_allowance=Decimal(transport),
                        effective_from=date(2019, 3, 1),
                    )
                )
                employees.append(employee)
            session.add_all(employees)
            await session.flush()

            session.add(
                Loan(
                    employee_id=employees[1].employee_id,
                    company_id=company.company_id,
                    loan_amount=Decimal("12000"),
                    remaining_amount=Decimal("9000"),
                    monthly_installment=Decimal("1000"),
                    start_date=date(2024, 6, 1),
                    status="active",
                )
            )
            session.add(
                Advance(
                    employee_id=employees[3].employee_id,
                    company_id=company.company_id,
                    amount=Decimal("3000"),
                    remaining_amount=Decimal("1500"),
                    deduction_amount=Decimal("500"),
                    request_date=date(2024, 11, 15),
                    status="approved",
                )
            )
            await session.flush()

            result, _ = await ComplianceService(session).record_snapshot(company.company_id)
            batch = await PayrollBatchService(session).create_batch(company.company_id, month)
            await session.commit()

            print(f"Company: {company.company_id}")
            print(f"Nitaqat: {result.zone.value} ({result.saudization_percentage}%)")
            print(
                f"Batch {batch.batch_id}: {batch.total_employees} employees, "
                f"gross {batch.total_gross}, net {batch.total_net}"
            )
    finally:
        await engine.dispose()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Load demo data into the database")
    parser.add_argument(
        "--database-url",
        type=str,
        default=get_settings().database_url,
        help="Database URL (default: from settings)",
    )
    parser.add_argument(
        "--month",
        type=str,
        default=date.today().strftime("%Y-%m"),
        help="Payroll month to create (default: current month)",
    )

    args = parser.parse_args()

    configure_logging()
    asyncio.run(load_fixtures(args.database_url, args.month))


if __name__ == "__main__":
    main()
