# /hms/services/appointment.py
from flask import current_app
from sqlalchemy.orm import contains_eager, joinedload

from hms.extensions import db
from hms.models.appointment_models import Appointment, APPOINTMENT_STATUSES
from hms.models.patient_models import Patient
from hms.models.user_models import Doctor
from hms.services.notifications import notify
from hms.utils.exceptions import NotFoundError, PermissionDeniedError, ServiceError

# Roles that may book for any patient and change any appointment's status
_MANAGING_ROLES = ('admin', 'nurse')


def create_new_appointment(data, user_id, role):
    """Books an appointment from a validated AppointmentForm.

    Patients always book for themselves; admins and staff name the patient.
    """
    if role == 'patient':
        patient_id = user_id
    else:
        patient_id = data.patient_id
        if not patient_id:
            raise ServiceError('patient_id is required')

    patient = db.session.get(Patient, patient_id)
    if not patient:
        raise NotFoundError('Patient not found')
    doctor = db.session.get(Doctor, data.doctor_id)
    if not doctor:
        raise NotFoundError('Doctor not found')

    appointment = Appointment(
        patient_id=patient_id,
        doctor_id=doctor.id,
        appointment_date=data.appointment_date,
        time=data.time,
        type=data.type,
        note=data.note,
        status='PENDING',
    )
    db.session.add(appointment)
    notify(
        doctor.id, 'appointment', 'New appointment',
        f"{patient.name} booked a {data.type} appointment on {data.appointment_date.isoformat()} at {data.time}."
    )
    db.session.commit()

    current_app.logger.info(f"Appointment {appointment.id} booked for patient {patient_id} with doctor {doctor.id}")
    return appointment


def appointment_action(appointment_id, status, reason, user_id, role):
    """Sets an appointment's status and reason. Returns the confirmation message."""
    if status not in APPOINTMENT_STATUSES:
        raise ServiceError(f"Invalid status: {status}")

    appointment = db.session.get(Appointment, appointment_id)
    if not appointment:
        raise NotFoundError('Appointment not found')

    if role in _MANAGING_ROLES or (role == 'doctor' and appointment.doctor_id == user_id):
        pass
    elif role == 'patient' and appointment.patient_id == user_id:
        if status != 'CANCELLED':
            raise PermissionDeniedError('Patients can only cancel their appointments')
    else:
        raise PermissionDeniedError('You are not allowed to update this appointment')

    appointment.status = status
    appointment.reason = reason
    notify(
        appointment.patient_id, 'appointment', 'Appointment update',
        f"Your appointment on {appointment.appointment_date.isoformat()} is now {status.lower()}."
    )
    db.session.commit()

    return f"Appointment {status.lower()} successfully"


def get_appointment_by_id(appointment_id):
    appointment = (
        Appointment.query
        .options(joinedload(Appointment.patient), joinedload(Appointment.doctor))
        .filter(Appointment.id == appointment_id)
        .first()
    )
    if not appointment:
        raise NotFoundError('Appointment not found')
    return appointment


def _scoped_id(requested_id, user_id, role):
    """Resolves whose appointments a caller may list."""
    if role == 'admin':
        return requested_id
    if role in ('doctor', 'nurse') and requested_id:
        return requested_id
    if role in ('doctor', 'patient'):
        return user_id
    if role == 'nurse':
        return None
    raise PermissionDeniedError('You are not allowed to view appointments')


def get_patient_appointments(user_id, role, page=1, search=None, id=None, date=None, status=None):
    """Paginated appointments, newest first.

    ``id`` matches either the patient or the doctor, ``search`` matches their
    names and ``date`` restricts to a single day.
    """
    scoped_id = _scoped_id(id, user_id, role)

    query = (
        Appointment.query
        .join(Patient, Appointment.patient_id == Patient.id)
        .join(Doctor, Appointment.doctor_id == Doctor.id)
        .options(contains_eager(Appointment.patient), contains_eager(Appointment.doctor))
    )
    if scoped_id:
        query = query.filter(db.or_(Appointment.patient_id == scoped_id, Appointment.doctor_id == scoped_id))
    if search:
        like = f"%{search}%"
        query = query.filter(db.or_(
            Patient.first_name.ilike(like),
            Patient.last_name.ilike(like),
            Doctor.name.ilike(like),
        ))
    if date:
        query = query.filter(Appointment.appointment_date == date)
    if status:
        status = status.upper()
        if status not in APPOINTMENT_STATUSES:
            raise ServiceError(f"Invalid status: {status}")
        query = query.filter(Appointment.status == status)

    limit = current_app.config['DATA_LIMIT']
    pagination = query.order_by(Appointment.created_at.desc(), Appointment.id.desc()).paginate(
        page=page, per_page=limit, error_out=False
    )
    return {
        'data': [a.to_dict() for a in pagination.items],
        'total_pages': pagination.pages,
        'total_records': pagination.total,
        'current_page': page,
    }
