from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from settleup.db.session import Base
from settleup.core.utils import utcnow

class Activity(Base):
    __tablename__ = "activities"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False)
    group_id = Column(String, ForeignKey("groups.id", ondelete="CASCADE"), nullable=True, index=True)
    type = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    related_id = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
