from sqlalchemy import Column, String, Numeric, Date, ForeignKey

from app.db.base_class import Base


class Compensation(Base):
    __tablename__ = "compensations"  # type: ignore[assignment]

    id = Column(String(36), primary_key=True, index=True)
    # Unique: a second insert for the same employee fails at commit
    employee_id = Column(
        String(36),
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    salary = Column(Numeric(12, 2), nullable=False)
    effective_date = Column(Date, nullable=False)
