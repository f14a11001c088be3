from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, false
from settleup.db.session import Base
from settleup.core.utils import utcnow

class Expense(Base):
    __tablename__ = "expenses"

    id = Column(String, primary_key=True)
    group_id = Column(String, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(String, nullable=False, default="")
    amount = Column(Numeric(12, 2), nullable=False)
    category = Column(String, nullable=False, default="Other")
    strategy = Column(String, nullable=False, default="equal")
    paid_by = Column(String, nullable=False)
    created_by = Column(String, nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    is_deleted = Column(Boolean, nullable=False, server_default=false())

    splits = relationship(
        "ExpenseSplit",
        back_populates="expense",
        cascade="all, delete"
    )
