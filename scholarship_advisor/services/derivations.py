"""Scholarship derivations.

Pure functions turning a ``StudentRecord`` into eligibility, scholarship
recommendations and a performance analysis. Nothing here touches the
database or the session, so every rule can be tested on a bare record.
"""
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, field_serializer

from scholarship_advisor.models.user import isoformat_utc


CGPA_THRESHOLD = 7.5
ATTENDANCE_THRESHOLD = 75.0
MERIT_CGPA = 8.0
PRIVATE_MERIT_CGPA = 8.5
TREND_DEADBAND = 0.1


class StudentRecord(BaseModel):
    """Academic details of one student as the derivations see them."""

    model_config = ConfigDict(from_attributes=True)

    user_id: Optional[int] = None
    roll_number: str
    btech_year: str
    gender: str
    category: str
    quota_type: str
    present_cgpa: float
    previous_cgpa: float
    attendance: float
    active_backlogs: bool
    updated_at: Optional[datetime] = None

    @field_serializer("active_backlogs")
    def serialize_active_backlogs(self, value: bool) -> str:
        return "Yes" if value else "No"

    @field_serializer("updated_at")
    def serialize_updated_at(self, value: Optional[datetime]) -> Optional[str]:
        return isoformat_utc(value) if value is not None else None

    def public_dict(self) -> dict:
        """Record as returned to the student, without the owning user id."""
        return self.model_dump(mode="json", exclude={"user_id"})


class EligibilityResult(BaseModel):
    eligibility_status: str
    eligible: bool
    reasons: List[str]


class Scholarship(BaseModel):
    name: str
    link: str
    description: str


class RecommendationSet(BaseModel):
    government_scholarships: List[Scholarship]
    private_scholarships: List[Scholarship]
    merit_scholarships: List[Scholarship]


class Trend(str, Enum):
    IMPROVED = "improved"
    DECLINED = "declined"
    STABLE = "stable"


class AttendanceStatus(str, Enum):
    GOOD = "good"
    NEEDS_IMPROVEMENT = "needs-improvement"


class PerformanceAnalysis(BaseModel):
    trend: Trend
    message: str
    cgpa_difference: float
    attendance_status: AttendanceStatus
    attendance: float


# Scholarship catalogue
NATIONAL_SCHOLARSHIP_PORTAL = Scholarship(
    name="National Scholarship Portal (NSP)",
    link="https://scholarships.gov.in",
    description="Central portal for multiple government scholarships",
)
PRAGATI_GIRLS = Scholarship(
    name="Pragati Scholarship (Girls)",
    link="https://www.aicte-pragati-saksham-gov.in/",
    description="AICTE scholarship for female students in technical education",
)
AICTE_SAKSHAM = Scholarship(
    name="AICTE Saksham",
    link="https://www.aicte-pragati-saksham-gov.in/",
    description="Support for students with special needs; check eligibility",
)
POST_MATRIC_SC_ST = Scholarship(
    name="Post-Matric Scholarship (SC/ST)",
    link="https://scholarships.gov.in",
    description="Financial assistance for SC/ST students",
)
POST_MATRIC_OBC = Scholarship(
    name="Post-Matric Scholarship (OBC)",
    link="https://scholarships.gov.in",
    description="Financial assistance for OBC students",
)
UGC_MERIT = Scholarship(
    name="UGC Merit Scholarship",
    link="https://www.ugc.gov.in/",
    description="Merit-based scholarship for high-performing students",
)
ADITYA_BIRLA = Scholarship(
    name="Aditya Birla Scholarship",
    link="https://www.adityabirlascholars.net/",
    description="Private merit-based scholarship for engineering students",
)
INTERNSHALA = Scholarship(
    name="Internshala Internships",
    link="https://internshala.com",
    description="Internship portal to enhance profile and employability",
)


def format_number(value: float) -> str:
    """Render a number the way students type it: 8 rather than 8.0, digits kept."""
    value = float(value)
    return str(int(value)) if value.is_integer() else repr(value)


def round_half_up(value: float, places: int = 2) -> float:
    """Round the exact binary value, breaking ties away from zero."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def normalize_category(category: str) -> str:
    return (category or "").strip().upper()


def compute_eligibility(record: StudentRecord) -> EligibilityResult:
    """Check the four scholarship criteria.

    CGPA thresholds are strict (> 7.5), attendance is inclusive (>= 75).
    One reason is listed per unmet criterion, always in the order present
    CGPA, previous CGPA, attendance, backlogs.
    """
    reasons: List[str] = []
    if not record.present_cgpa > CGPA_THRESHOLD:
        reasons.append(
            f"Present CGPA ({format_number(record.present_cgpa)}) must be > {format_number(CGPA_THRESHOLD)}"
        )
    if not record.previous_cgpa > CGPA_THRESHOLD:
        reasons.append(
            f"Previous CGPA ({format_number(record.previous_cgpa)}) must be > {format_number(CGPA_THRESHOLD)}"
        )
    if not record.attendance >= ATTENDANCE_THRESHOLD:
        reasons.append(
            f"Attendance ({format_number(record.attendance)}%) must be ≥ {format_number(ATTENDANCE_THRESHOLD)}%"
        )
    if record.active_backlogs:
        reasons.append("No active backlogs allowed")

    eligible = not reasons
    return EligibilityResult(
        eligibility_status="Eligible" if eligible else "Not Eligible",
        eligible=eligible,
        reasons=reasons,
    )


def build_recommendations(record: StudentRecord) -> RecommendationSet:
    """Collect matching scholarships.

    Every rule is evaluated on its own; a record can pick up entries from
    several rules. Order inside each list follows rule order.
    """
    government: List[Scholarship] = []
    private: List[Scholarship] = []
    merit: List[Scholarship] = [NATIONAL_SCHOLARSHIP_PORTAL]

    if record.gender.strip().lower() == "female" and "convener" in record.quota_type.lower():
        government.append(PRAGATI_GIRLS)
        government.append(AICTE_SAKSHAM)

    category = normalize_category(record.category)
    if category in ("SC", "ST"):
        government.append(POST_MATRIC_SC_ST)
    if category == "OBC":
        government.append(POST_MATRIC_OBC)

    if record.present_cgpa >= MERIT_CGPA:
        merit.append(UGC_MERIT)
    if record.present_cgpa >= PRIVATE_MERIT_CGPA:
        private.append(ADITYA_BIRLA)

    private.append(INTERNSHALA)

    return RecommendationSet(
        government_scholarships=government,
        private_scholarships=private,
        merit_scholarships=merit,
    )


def analyze_performance(record: StudentRecord) -> PerformanceAnalysis:
    difference = round_half_up(record.present_cgpa - record.previous_cgpa)

    if difference > TREND_DEADBAND:
        trend = Trend.IMPROVED
        message = f"CGPA improved by {format_number(difference)}"
    elif difference < -TREND_DEADBAND:
        trend = Trend.DECLINED
        message = f"CGPA declined by {format_number(abs(difference))}"
    else:
        trend = Trend.STABLE
        message = "CGPA is stable"

    if record.attendance >= ATTENDANCE_THRESHOLD:
        attendance_status = AttendanceStatus.GOOD
    else:
        attendance_status = AttendanceStatus.NEEDS_IMPROVEMENT

    return PerformanceAnalysis(
        trend=trend,
        message=message,
        cgpa_difference=difference,
        attendance_status=attendance_status,
        attendance=record.attendance,
    )
