# /hms/services/dashboard.py
"""Statistics for the admin, doctor and patient dashboards."""
import calendar
from datetime import date

from sqlalchemy.orm import joinedload

from hms.extensions import db
from hms.models.appointment_models import Appointment, APPOINTMENT_STATUSES
from hms.models.patient_models import Patient
from hms.models.user_models import Doctor, Staff, WorkingDay


def _status_counts(query):
    rows = (
        query.with_entities(Appointment.status, db.func.count(Appointment.id))
        .group_by(Appointment.status)
        .all()
    )
    counts = {status: 0 for status in APPOINTMENT_STATUSES}
    counts.update({status: total for status, total in rows})
    return counts


def monthly_appointment_series(query, year=None):
    """Twelve entries of {name, appointment, completed} for ``year``."""
    year = year or date.today().year
    series = [
        {'name': calendar.month_abbr[month], 'appointment': 0, 'completed': 0}
        for month in range(1, 13)
    ]
    rows = (
        query.filter(Appointment.appointment_date.between(date(year, 1, 1), date(year, 12, 31)))
        .with_entities(Appointment.appointment_date, Appointment.status)
        .all()
    )
    for appointment_date, status in rows:
        entry = series[appointment_date.month - 1]
        entry['appointment'] += 1
        if status == 'COMPLETED':
            entry['completed'] += 1
    return series


def _last_appointments(query, limit=5):
    return [
        a.to_dict()
        for a in query.options(joinedload(Appointment.patient), joinedload(Appointment.doctor))
        .order_by(Appointment.created_at.desc(), Appointment.id.desc())
        .limit(limit)
        .all()
    ]


def available_doctors(today=None):
    """Doctors with a working day matching today's weekday."""
    weekday = (today or date.today()).strftime('%A').lower()
    doctors = (
        Doctor.query
        .join(WorkingDay)
        .filter(WorkingDay.day == weekday)
        .distinct()
        .order_by(Doctor.name.asc())
        .limit(4)
        .all()
    )
    return [d.to_dict(include_schedule=True) for d in doctors]


def _summary(query):
    counts = _status_counts(query)
    return {
        'total_appointments': sum(counts.values()),
        'appointment_counts': counts,
        'monthly_data': monthly_appointment_series(query),
        'last_appointments': _last_appointments(query),
        'available_doctors': available_doctors(),
    }


def get_admin_dashboard_stats():
    stats = _summary(Appointment.query)
    stats.update({
        'total_patients': Patient.query.count(),
        'total_doctors': Doctor.query.count(),
    })
    return stats


def get_doctor_dashboard_stats(doctor_id):
    query = Appointment.query.filter(Appointment.doctor_id == doctor_id)
    stats = _summary(query)
    stats.update({
        'total_patients': (
            db.session.query(db.func.count(db.distinct(Appointment.patient_id)))
            .filter(Appointment.doctor_id == doctor_id)
            .scalar()
        ),
        'total_nurses': Staff.query.filter_by(role='NURSE').count(),
    })
    return stats


def get_patient_dashboard_stats(patient_id):
    patient = db.session.get(Patient, patient_id)
    query = Appointment.query.filter(Appointment.patient_id == patient_id)
    stats = _summary(query)
    stats['patient'] = patient.to_dict(include_private=False) if patient else None
    return stats
