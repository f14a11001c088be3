from sqlalchemy import Column, ForeignKey, Integer, String, DateTime, UniqueConstraint, func
from settleup.db.session import Base
from sqlalchemy.orm import relationship

class GroupMember(Base):
    __tablename__ = "group_members"
    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_group_member_user"),
    )

    id = Column(Integer, primary_key=True, index=True)

    group_id = Column(String, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String, nullable=False)
    name = Column(String, nullable=False, default="")
    role = Column(String, nullable=False, default="member")
    joined_at = Column(DateTime(timezone=True), server_default=func.now())

    group = relationship("Group", back_populates="members")
