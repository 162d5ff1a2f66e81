"""Company (tenant) model."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_compliance.calculators.types import CompanyComplianceConfig
from hr_compliance.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from hr_compliance.models.employee import Employee


class Company(Base, TimestampMixin):
    """Employer; the multi-tenant container."""

    __tablename__ = "company"

    company_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    sector: Mapped[str | None] = mapped_column(String, nullable=True)
    entity_size: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")

    __table_args__ = (
        CheckConstraint("status IN ('active', 'suspended', 'closed')", name="company_status_check"),
    )

    # Relationships
    employees: Mapped[list[Employee]] = relationship(back_populates="company")

    def compliance_config(self) -> CompanyComplianceConfig:
        return CompanyComplianceConfig(entity_size=self.entity_size, sector=self.sector)
