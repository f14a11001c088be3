from sqlalchemy import Column, String, DateTime, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, false
from settleup.db.session import Base
from settleup.core.utils import utcnow

class Group(Base):
    __tablename__ = "groups"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    is_deleted = Column(Boolean, nullable=False, server_default=false())

    members = relationship(
        "GroupMember",
        back_populates="group",
        cascade="all, delete"
    )
