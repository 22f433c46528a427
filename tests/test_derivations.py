from datetime import datetime

from scholarship_advisor.services.derivations import (
    AttendanceStatus,
    StudentRecord,
    Trend,
    analyze_performance,
    build_recommendations,
    compute_eligibility,
)


def make_record(**overrides) -> StudentRecord:
    fields = {
        "roll_number": "21CS1001",
        "btech_year": "2",
        "gender": "Male",
        "category": "General",
        "quota_type": "Management Quota",
        "present_cgpa": 8.0,
        "previous_cgpa": 7.8,
        "attendance": 80.0,
        "active_backlogs": False,
    }
    fields.update(overrides)
    return StudentRecord(**fields)


def _names(scholarships) -> list:
    return [item.name for item in scholarships]


def test_eligible_when_all_criteria_hold() -> None:
    result = compute_eligibility(make_record())

    assert result.eligible is True
    assert result.eligibility_status == "Eligible"
    assert result.reasons == []


def test_present_cgpa_at_threshold_is_not_eligible() -> None:
    result = compute_eligibility(make_record(present_cgpa=7.5))

    assert result.eligible is False
    assert result.eligibility_status == "Not Eligible"
    assert result.reasons == ["Present CGPA (7.5) must be > 7.5"]


def test_attendance_at_threshold_counts_as_met() -> None:
    result = compute_eligibility(make_record(attendance=75))

    assert result.eligible is True


def test_attendance_just_below_threshold() -> None:
    result = compute_eligibility(make_record(attendance=74.9))

    assert result.reasons == ["Attendance (74.9%) must be ≥ 75%"]


def test_every_unmet_criterion_is_listed_in_fixed_order() -> None:
    record = make_record(present_cgpa=6.0, previous_cgpa=7.0, attendance=60, active_backlogs=True)

    result = compute_eligibility(record)

    assert result.eligible is False
    assert result.reasons == [
        "Present CGPA (6) must be > 7.5",
        "Previous CGPA (7) must be > 7.5",
        "Attendance (60%) must be ≥ 75%",
        "No active backlogs allowed",
    ]


def test_backlogs_alone_block_eligibility() -> None:
    result = compute_eligibility(make_record(active_backlogs=True))

    assert result.eligible is False
    assert result.reasons == ["No active backlogs allowed"]


def test_recommendations_for_female_convener_sc_high_cgpa() -> None:
    record = make_record(gender="female", quota_type="Convener Quota", category="SC", present_cgpa=9.0)

    result = build_recommendations(record)

    assert _names(result.government_scholarships) == [
        "Pragati Scholarship (Girls)",
        "AICTE Saksham",
        "Post-Matric Scholarship (SC/ST)",
    ]
    assert _names(result.merit_scholarships) == [
        "National Scholarship Portal (NSP)",
        "UGC Merit Scholarship",
    ]
    assert _names(result.private_scholarships) == [
        "Aditya Birla Scholarship",
        "Internshala Internships",
    ]


def test_recommendations_baseline_has_portal_and_internships_only() -> None:
    result = build_recommendations(make_record(present_cgpa=7.0))

    assert result.government_scholarships == []
    assert _names(result.merit_scholarships) == ["National Scholarship Portal (NSP)"]
    assert _names(result.private_scholarships) == ["Internshala Internships"]


def test_female_without_convener_quota_gets_no_gender_entries() -> None:
    result = build_recommendations(make_record(gender="Female", quota_type="Management"))

    assert result.government_scholarships == []


def test_category_matching_is_case_and_whitespace_insensitive() -> None:
    st = build_recommendations(make_record(category=" st "))
    obc = build_recommendations(make_record(category="obc"))

    assert _names(st.government_scholarships) == ["Post-Matric Scholarship (SC/ST)"]
    assert _names(obc.government_scholarships) == ["Post-Matric Scholarship (OBC)"]


def test_merit_threshold_without_private_threshold() -> None:
    result = build_recommendations(make_record(present_cgpa=8.0))

    assert _names(result.merit_scholarships)[-1] == "UGC Merit Scholarship"
    assert _names(result.private_scholarships) == ["Internshala Internships"]


def test_performance_improved() -> None:
    result = analyze_performance(make_record(present_cgpa=8.5, previous_cgpa=8.0))

    assert result.trend == Trend.IMPROVED
    assert result.cgpa_difference == 0.5
    assert result.message == "CGPA improved by 0.5"


def test_performance_declined_reports_absolute_difference() -> None:
    result = analyze_performance(make_record(present_cgpa=7.0, previous_cgpa=7.5))

    assert result.trend == Trend.DECLINED
    assert result.cgpa_difference == -0.5
    assert result.message == "CGPA declined by 0.5"


def test_performance_deadband_edges_are_stable() -> None:
    up = analyze_performance(make_record(present_cgpa=7.6, previous_cgpa=7.5))
    down = analyze_performance(make_record(present_cgpa=7.4, previous_cgpa=7.5))

    assert up.trend == Trend.STABLE
    assert up.cgpa_difference == 0.1
    assert up.message == "CGPA is stable"
    assert down.trend == Trend.STABLE
    assert down.cgpa_difference == -0.1


def test_performance_attendance_status() -> None:
    good = analyze_performance(make_record(attendance=75))
    poor = analyze_performance(make_record(attendance=74.99))

    assert good.attendance_status == AttendanceStatus.GOOD
    assert poor.attendance_status == AttendanceStatus.NEEDS_IMPROVEMENT
    assert poor.attendance == 74.99


def test_performance_is_repeatable() -> None:
    record = make_record(present_cgpa=8.3, previous_cgpa=8.1)

    first = analyze_performance(record)
    second = analyze_performance(record)

    assert first == second
    assert first.cgpa_difference == 0.2


def test_public_dict_hides_user_id_and_renders_backlogs() -> None:
    record = make_record(user_id=4, active_backlogs=True)

    data = record.public_dict()

    assert "user_id" not in data
    assert data["active_backlogs"] == "Yes"


def test_performance_breaks_exact_ties_away_from_zero() -> None:
    up = analyze_performance(make_record(present_cgpa=8.625, previous_cgpa=8.5))
    down = analyze_performance(make_record(present_cgpa=8.5, previous_cgpa=8.625))

    assert up.cgpa_difference == 0.13
    assert up.message == "CGPA improved by 0.13"
    assert down.cgpa_difference == -0.13
    assert down.message == "CGPA declined by 0.13"


def test_reasons_keep_every_digit_of_the_submitted_value() -> None:
    result = compute_eligibility(make_record(attendance=74.1234567, present_cgpa=0.00001))

    assert result.reasons == [
        "Present CGPA (1e-05) must be > 7.5",
        "Attendance (74.1234567%) must be ≥ 75%",
    ]


def test_public_dict_renders_updated_at_in_utc() -> None:
    record = make_record(updated_at=datetime(2026, 3, 1, 9, 30))

    assert record.public_dict()["updated_at"] == "2026-03-01T09:30:00+00:00"
