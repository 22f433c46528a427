"""Student academic details, performance and report routes."""
from typing import Any, Dict
from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from scholarship_advisor.db.sessions import get_db
from scholarship_advisor.core.errors import NotFoundError, NO_STUDENT_DETAILS
from scholarship_advisor.core.security import get_current_user_id
from scholarship_advisor.services.derivations import StudentRecord, analyze_performance
from scholarship_advisor.services.report import build_report
from scholarship_advisor.services.student_records import get_student_record, upsert_student_record


router = APIRouter(prefix="/student", tags=["Student"])


def require_student_record(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> StudentRecord:
    """Dependency yielding the caller's record or a 404 when none was submitted."""
    record = get_student_record(db, user_id)
    if record is None:
        raise NotFoundError(NO_STUDENT_DETAILS)
    return record


@router.post("/details")
def save_details(
    payload: Dict[str, Any] = Body(...),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Create or replace the caller's academic details (all nine fields required)."""
    upsert_student_record(db, user_id, payload)
    return {"success": True, "message": "Student details saved"}


@router.get("/details")
def get_details(record: StudentRecord = Depends(require_student_record)):
    return {"success": True, "data": record.public_dict()}


@router.get("/performance")
def get_performance(record: StudentRecord = Depends(require_student_record)):
    return {"success": True, "data": analyze_performance(record)}


@router.get("/report")
def get_report(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Profile, academic details, eligibility, recommendations and performance in one response."""
    return {"success": True, "data": build_report(db, user_id)}
