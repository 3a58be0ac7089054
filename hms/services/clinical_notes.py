# /hms/services/clinical_notes.py
"""Append-only version history for a medical record's clinical notes."""
from flask import current_app
from sqlalchemy.exc import IntegrityError

from hms.extensions import db
from hms.models.clinical_notes_models import ClinicalNotesVersion
from hms.models.medical_models import MedicalRecord
from hms.utils.exceptions import ConflictError, NotFoundError, ServiceError


def list_versions(medical_record_id):
    """Every version of a record's notes, newest first."""
    return (
        ClinicalNotesVersion.query
        .filter_by(medical_record_id=medical_record_id)
        .order_by(ClinicalNotesVersion.version_number.desc())
        .all()
    )


def add_version(medical_record, notes, change_reason=None):
    """Appends a version to ``medical_record`` on the current session without committing.

    Earlier versions lose ``is_current`` before the new row is flushed so the
    partial unique index on current versions holds at every step.
    """
    latest = (
        db.session.query(db.func.max(ClinicalNotesVersion.version_number))
        .filter(ClinicalNotesVersion.medical_record_id == medical_record.id)
        .scalar()
    )
    next_version = (latest or 0) + 1

    if latest:
        ClinicalNotesVersion.query.filter_by(
            medical_record_id=medical_record.id, is_current=True
        ).update({'is_current': False}, synchronize_session='fetch')

    version = ClinicalNotesVersion(
        medical_record_id=medical_record.id,
        doctor_id=medical_record.doctor_id,
        notes=notes,
        version_number=next_version,
        change_reason=change_reason,
        is_current=True,
    )
    db.session.add(version)
    medical_record.notes = notes
    return version


def create_version(medical_record_id, notes, change_reason=None):
    """Creates the next notes version and makes it current, in one transaction."""
    if not notes or not notes.strip():
        raise ServiceError('Notes are required')

    medical_record = (
        MedicalRecord.query
        .filter_by(id=medical_record_id)
        .with_for_update()
        .first()
    )
    if not medical_record:
        raise NotFoundError('Medical record not found')

    version = add_version(medical_record, notes, change_reason)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError('Clinical notes were updated concurrently, please retry')

    current_app.logger.info(
        f"Clinical notes for record {medical_record_id} saved as version {version.version_number}"
    )
    return version
