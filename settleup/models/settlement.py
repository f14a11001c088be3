from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey
from sqlalchemy.sql import func
from settleup.db.session import Base
from settleup.core.utils import utcnow

class Settlement(Base):
    __tablename__ = "settlements"

    id = Column(String, primary_key=True)
    group_id = Column(String, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    from_user = Column(String, nullable=False)
    to_user = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_by = Column(String, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
