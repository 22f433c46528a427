"""Database models."""
from scholarship_advisor.models.user import User
from scholarship_advisor.models.student_detail import StudentDetail

__all__ = [
    "User",
    "StudentDetail",
]
