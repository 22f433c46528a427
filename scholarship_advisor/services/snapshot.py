"""Whole-store snapshots.

A snapshot is ``{"users": [...], "student_details": [...]}`` where every
entry is a flat dict of primitives. It matches the layout of the JSON data
file earlier deployments stored everything in, so those files can be imported.
"""
from typing import Any, Dict, List
import json
import logging
from datetime import datetime
from pathlib import Path
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scholarship_advisor.core.errors import StorageError
from scholarship_advisor.db.sessions import write_guard
from scholarship_advisor.models.student_detail import StudentDetail
from scholarship_advisor.models.user import User, isoformat_utc
from scholarship_advisor.services.student_records import BACKLOG_ANSWERS

logger = logging.getLogger(__name__)

Snapshot = Dict[str, List[Dict[str, Any]]]


def empty_snapshot() -> Snapshot:
    return {"users": [], "student_details": []}


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    # JavaScript's toISOString() ends in "Z"
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _user_to_dict(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "password_hash": user.password_hash,
        "created_at": isoformat_utc(user.created_at),
    }


def _detail_to_dict(detail: StudentDetail) -> Dict[str, Any]:
    return {
        "user_id": detail.user_id,
        "roll_number": detail.roll_number,
        "btech_year": detail.btech_year,
        "gender": detail.gender,
        "category": detail.category,
        "quota_type": detail.quota_type,
        "present_cgpa": detail.present_cgpa,
        "previous_cgpa": detail.previous_cgpa,
        "attendance": detail.attendance,
        "active_backlogs": "Yes" if detail.active_backlogs else "No",
        "updated_at": isoformat_utc(detail.updated_at),
    }


def load_snapshot(db: Session) -> Snapshot:
    """Read every user and student record, ordered by id."""
    try:
        users = db.query(User).order_by(User.id).all()
        details = db.query(StudentDetail).order_by(StudentDetail.id).all()
    except SQLAlchemyError as exc:
        logger.exception("Error loading data")
        raise StorageError("Failed to load stored data") from exc

    return {
        "users": [_user_to_dict(user) for user in users],
        "student_details": [_detail_to_dict(detail) for detail in details],
    }


def _parse_backlogs(value: Any) -> bool:
    if value not in BACKLOG_ANSWERS:
        raise ValueError(f"active_backlogs must be 'Yes' or 'No', got {value!r}")
    return BACKLOG_ANSWERS[value]


def _user_from_dict(entry: Dict[str, Any]) -> User:
    return User(
        id=int(entry["id"]),
        name=entry["name"],
        email=entry["email"],
        phone=entry.get("phone") or None,
        password_hash=entry["password_hash"],
        created_at=_parse_timestamp(entry["created_at"]),
    )


def _detail_from_dict(entry: Dict[str, Any]) -> StudentDetail:
    return StudentDetail(
        user_id=int(entry["user_id"]),
        roll_number=str(entry["roll_number"]),
        btech_year=str(entry["btech_year"]),
        gender=entry["gender"],
        category=entry["category"],
        quota_type=entry["quota_type"],
        present_cgpa=float(entry["present_cgpa"]),
        previous_cgpa=float(entry["previous_cgpa"]),
        attendance=float(entry["attendance"]),
        active_backlogs=_parse_backlogs(entry["active_backlogs"]),
        updated_at=_parse_timestamp(entry["updated_at"]),
    )


def save_snapshot(db: Session, snapshot: Snapshot) -> None:
    """Replace the stored users and student records with the snapshot.

    Runs as one transaction: either the whole snapshot is stored or the
    previous contents are kept and StorageError is raised.
    """
    try:
        users = [_user_from_dict(entry) for entry in snapshot.get("users", [])]
        details = [_detail_from_dict(entry) for entry in snapshot.get("student_details", [])]
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise StorageError(f"Malformed snapshot: {exc}") from exc

    with write_guard():
        try:
            db.query(StudentDetail).delete()
            db.query(User).delete()
            db.flush()
            db.add_all(users)
            db.flush()
            db.add_all(details)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Error saving data")
            raise StorageError("Failed to save data") from exc

    logger.info("Saved snapshot: %d users, %d student records", len(users), len(details))


def read_snapshot_file(path: Path) -> Snapshot:
    """Parse a JSON snapshot file; a missing file is an empty snapshot."""
    if not path.exists():
        return empty_snapshot()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.error("Error loading data from %s: %s", path, exc)
        raise StorageError(f"Could not read {path}") from exc
    if not isinstance(data, dict):
        raise StorageError(f"Malformed snapshot in {path}")

    snapshot = empty_snapshot()
    snapshot["users"] = list(data.get("users") or [])
    snapshot["student_details"] = list(data.get("student_details") or [])
    return snapshot


def import_snapshot_file(db: Session, path: Path) -> bool:
    """Load a JSON snapshot file into an empty database.

    Returns True when data was imported. Nothing happens if the database
    already holds users or the file does not exist.
    """
    try:
        user_count = db.query(func.count(User.id)).scalar()
    except SQLAlchemyError as exc:
        raise StorageError("Failed to inspect stored data") from exc
    if user_count:
        logger.info("Skipping import of %s: database already has %d users", path, user_count)
        return False

    snapshot = read_snapshot_file(path)
    if not snapshot["users"]:
        return False
    save_snapshot(db, snapshot)
    logger.info("Imported %d users from %s", len(snapshot["users"]), path)
    return True
