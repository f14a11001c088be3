from sqlalchemy import Column, Integer, String, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from settleup.db.session import Base

class ExpenseSplit(Base):
    __tablename__ = "expense_splits"

    id = Column(Integer, primary_key=True)
    expense_id = Column(String, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    percentage = Column(Numeric(6, 2), nullable=True)

    expense = relationship("Expense", back_populates="splits")
