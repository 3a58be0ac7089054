# /hms/services/medical.py
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload, selectinload

from hms.extensions import db
from hms.models.appointment_models import Appointment
from hms.models.medical_models import Diagnosis, MedicalRecord, VitalSigns
from hms.services.clinical_notes import add_version
from hms.utils.exceptions import NotFoundError, ServiceError


def _record_query():
    return MedicalRecord.query.options(
        joinedload(MedicalRecord.patient),
        selectinload(MedicalRecord.diagnosis),
        selectinload(MedicalRecord.vital_signs),
        joinedload(MedicalRecord.appointment).joinedload(Appointment.doctor),
    )


def create_medical_record(data):
    """Writes a record, its diagnosis and vital signs and completes the appointment.

    ``data`` is a validated MedicalRecordForm. When notes are supplied they
    become clinical-notes version 1. All rows are committed together.
    """
    appointment = db.session.get(Appointment, data.appointment_id)
    if not appointment:
        raise NotFoundError('Appointment not found')
    if appointment.patient_id != data.patient_id or appointment.doctor_id != data.doctor_id:
        raise ServiceError('Appointment does not match the patient and doctor given')

    record = MedicalRecord(
        patient_id=data.patient_id,
        appointment_id=data.appointment_id,
        doctor_id=data.doctor_id,
        treatment_plan=data.treatment_plan,
        prescriptions=data.prescriptions,
        lab_request=data.lab_request,
        notes=data.notes,
    )
    try:
        _write_record(record, appointment, data)
    except SQLAlchemyError:
        db.session.rollback()
        raise

    current_app.logger.info(f"Medical record {record.id} created for appointment {appointment.id}")
    return record


def _write_record(record, appointment, data):
    db.session.add(record)
    db.session.flush()

    db.session.add(Diagnosis(
        patient_id=data.patient_id,
        medical_id=record.id,
        doctor_id=data.doctor_id,
        symptoms=data.symptoms,
        diagnosis=data.diagnosis,
        notes=data.notes,
        prescribed_medications=data.prescribed_medications,
        follow_up_plan=data.follow_up_plan,
    ))
    db.session.add(VitalSigns(
        patient_id=data.patient_id,
        medical_id=record.id,
        body_temperature=data.body_temperature,
        systolic=data.systolic,
        diastolic=data.diastolic,
        heart_rate=data.heart_rate,
        respiratory_rate=data.respiratory_rate,
        oxygen_saturation=data.oxygen_saturation,
        weight=data.weight,
        height=data.height,
    ))

    if data.notes and data.notes.strip():
        add_version(record, data.notes, 'Initial notes')

    appointment.status = 'COMPLETED'
    db.session.commit()


def get_all_medical_records(page=1, search=None, patient_id=None):
    """Paginated records, newest first. ``patient_id`` restricts to one patient."""
    limit = current_app.config['DATA_LIMIT']
    query = _record_query()
    if patient_id:
        query = query.filter(MedicalRecord.patient_id == patient_id)
    if search:
        like = f"%{search}%"
        query = query.filter(db.or_(
            MedicalRecord.treatment_plan.ilike(like),
            MedicalRecord.notes.ilike(like),
        ))

    pagination = query.order_by(MedicalRecord.created_at.desc(), MedicalRecord.id.desc()).paginate(
        page=page, per_page=limit, error_out=False
    )
    return {
        'data': [record.to_dict() for record in pagination.items],
        'total_pages': pagination.pages,
        'total_records': pagination.total,
        'current_page': page,
    }


def get_medical_record_by_id(record_id):
    record = _record_query().filter(MedicalRecord.id == record_id).first()
    if not record:
        raise NotFoundError('Medical record not found')
    return record
