"""Scholarship eligibility and recommendation routes."""
from fastapi import APIRouter, Depends

from scholarship_advisor.routes.student import require_student_record
from scholarship_advisor.services.derivations import (
    StudentRecord,
    build_recommendations,
    compute_eligibility,
)


router = APIRouter(prefix="/scholarship", tags=["Scholarship"])


@router.get("/eligibility")
def get_eligibility(record: StudentRecord = Depends(require_student_record)):
    return {"success": True, "data": compute_eligibility(record)}


@router.get("/recommendations")
def get_recommendations(record: StudentRecord = Depends(require_student_record)):
    return {"success": True, "data": build_recommendations(record)}
