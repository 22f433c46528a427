"""Report assembly: profile, academic details and every derivation in one view."""
from typing import Any, Dict, Optional
import logging
from pydantic import BaseModel
from sqlalchemy.orm import Session

from scholarship_advisor.core.errors import NotFoundError, NO_STUDENT_DETAILS, USER_NOT_FOUND
from scholarship_advisor.services.derivations import (
    EligibilityResult,
    PerformanceAnalysis,
    RecommendationSet,
    analyze_performance,
    build_recommendations,
    compute_eligibility,
)
from scholarship_advisor.services.identity import resolve_current_user
from scholarship_advisor.services.student_records import get_student_record

logger = logging.getLogger(__name__)


class UserProfile(BaseModel):
    name: str
    email: str
    phone: Optional[str]


class Report(BaseModel):
    user_profile: UserProfile
    academic_details: Dict[str, Any]
    eligibility: EligibilityResult
    scholarship_recommendations: RecommendationSet
    performance: PerformanceAnalysis


def build_report(db: Session, user_id: int) -> Report:
    """Compose the full report for a user.

    Fails as a whole with NotFoundError when either the user or their
    academic record is missing; no partial report is produced.
    """
    user = resolve_current_user(db, user_id)
    if user is None:
        # A live session should always point at an existing user
        logger.warning("Session user %s has no account", user_id)
        raise NotFoundError(USER_NOT_FOUND)

    record = get_student_record(db, user_id)
    if record is None:
        raise NotFoundError(NO_STUDENT_DETAILS)

    return Report(
        user_profile=UserProfile(name=user.name, email=user.email, phone=user.phone),
        academic_details=record.public_dict(),
        eligibility=compute_eligibility(record),
        scholarship_recommendations=build_recommendations(record),
        performance=analyze_performance(record),
    )
