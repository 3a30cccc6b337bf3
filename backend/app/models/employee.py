from sqlalchemy import Column, Integer, String, ForeignKey, Index

from app.db.base_class import Base


class Employee(Base):
    __tablename__ = "employees"  # type: ignore[assignment]

    id = Column(String(36), primary_key=True, index=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    position = Column(String, nullable=True)
    department = Column(String, nullable=True)


class EmployeeDirectReport(Base):
    """Ordered manager -> report edge. One row per direct report."""

    __tablename__ = "employee_direct_reports"  # type: ignore[assignment]

    manager_id = Column(String(36), ForeignKey("employees.id", ondelete="CASCADE"), primary_key=True)
    report_id = Column(String(36), ForeignKey("employees.id", ondelete="CASCADE"), primary_key=True)
    ordinal = Column(Integer, nullable=False, default=0)


Index("idx_direct_reports_report_id", EmployeeDirectReport.report_id)
Index("idx_direct_reports_manager_ordinal", EmployeeDirectReport.manager_id, EmployeeDirectReport.ordinal)
