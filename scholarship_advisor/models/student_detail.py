"""Student academic details model."""
from sqlalchemy import Column, Integer, String, DateTime, Float, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from scholarship_advisor.db.base import Base
from scholarship_advisor.models.user import utcnow


class StudentDetail(Base):
    """One academic record per user."""
    
    __tablename__ = "student_details"
    
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False, index=True)
    roll_number = Column(String(50), nullable=False)
    btech_year = Column(String(20), nullable=False)
    gender = Column(String(30), nullable=False)
    category = Column(String(30), nullable=False)
    quota_type = Column(String(100), nullable=False)
    present_cgpa = Column(Float, nullable=False)
    previous_cgpa = Column(Float, nullable=False)
    attendance = Column(Float, nullable=False)
    active_backlogs = Column(Boolean, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    
    # Relationships
    user = relationship("User", back_populates="student_detail")
