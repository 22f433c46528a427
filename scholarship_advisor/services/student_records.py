"""Student record service.

Upsert and retrieval of the single academic record each user owns.
"""
from typing import Any, Dict, Optional
import logging
import math
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scholarship_advisor.core.errors import StorageError, ValidationError
from scholarship_advisor.db.sessions import write_guard
from scholarship_advisor.models.student_detail import StudentDetail
from scholarship_advisor.models.user import utcnow
from scholarship_advisor.services.derivations import StudentRecord

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = [
    "roll_number",
    "btech_year",
    "gender",
    "category",
    "quota_type",
    "present_cgpa",
    "previous_cgpa",
    "attendance",
    "active_backlogs",
]
TEXT_FIELDS = ["roll_number", "btech_year", "gender", "category", "quota_type"]
NUMERIC_FIELDS = ["present_cgpa", "previous_cgpa", "attendance"]
BACKLOG_ANSWERS = {"Yes": True, "No": False}


def _parse_number(field: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"{field} must be a number")
    return number


def validate_student_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Check the nine academic fields and convert them to stored types.

    Raises ValidationError naming every missing field at once.
    """
    missing = [
        field for field in REQUIRED_FIELDS
        if payload.get(field) is None or payload.get(field) == ""
    ]
    if missing:
        raise ValidationError(f"Missing fields: {', '.join(missing)}")

    active_backlogs = payload["active_backlogs"]
    if not isinstance(active_backlogs, str) or active_backlogs not in BACKLOG_ANSWERS:
        raise ValidationError("active_backlogs must be 'Yes' or 'No'")

    fields: Dict[str, Any] = {field: str(payload[field]) for field in TEXT_FIELDS}
    for field in NUMERIC_FIELDS:
        fields[field] = _parse_number(field, payload[field])
    fields["active_backlogs"] = BACKLOG_ANSWERS[active_backlogs]
    return fields


def upsert_student_record(db: Session, user_id: int, payload: Dict[str, Any]) -> StudentRecord:
    """Create or replace the academic record of a user."""
    fields = validate_student_payload(payload)

    with write_guard():
        try:
            detail = db.query(StudentDetail).filter(StudentDetail.user_id == user_id).first()
            if detail is None:
                detail = StudentDetail(user_id=user_id)
                db.add(detail)
            for field, value in fields.items():
                setattr(detail, field, value)
            detail.updated_at = utcnow()
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Failed to save student details for user %s", user_id)
            raise StorageError("Server error saving details") from exc

    db.refresh(detail)
    logger.info("Saved student details for user %s", user_id)
    return StudentRecord.model_validate(detail)


def get_student_record(db: Session, user_id: int) -> Optional[StudentRecord]:
    """Return the user's record, or None when nothing was submitted yet."""
    try:
        detail = db.query(StudentDetail).filter(StudentDetail.user_id == user_id).first()
    except SQLAlchemyError as exc:
        logger.exception("Failed to load student details for user %s", user_id)
        raise StorageError("Server error getting details") from exc

    if detail is None:
        return None
    return StudentRecord.model_validate(detail)
