# /hms/services/doctors.py
"""Doctors, staff and ratings, plus the admin actions that manage them."""
from flask import current_app
from sqlalchemy.exc import IntegrityError

from hms.extensions import db
from hms.models.billing_models import Payment
from hms.models.patient_models import Patient
from hms.models.user_models import Doctor, Rating, Staff, WorkingDay
from hms.services.identity import identity_client, split_name, validate_password
from hms.utils.exceptions import ConflictError, IdentityProviderError, NotFoundError, ServiceError
from hms.utils.helpers import random_color_code

DELETE_TYPES = ('doctor', 'staff', 'patient', 'payment')


def get_doctor_by_id(doctor_id):
    """Doctor with working days and the total number of appointments."""
    doctor = db.session.get(Doctor, doctor_id)
    if not doctor:
        raise NotFoundError('Doctor not found')
    return doctor, doctor.appointments.count()


def get_rating_by_id(doctor_id):
    ratings = (
        Rating.query
        .filter_by(staff_id=doctor_id)
        .order_by(Rating.created_at.desc())
        .all()
    )
    total = len(ratings)
    average = round(sum(r.rating for r in ratings) / total, 1) if total else 0.0
    return {
        'total_rating': total,
        'average_rating': average,
        'ratings': [r.to_dict() for r in ratings],
    }


def list_doctors(page=1, search=None):
    query = Doctor.query
    if search:
        like = f"%{search}%"
        query = query.filter(db.or_(
            Doctor.name.ilike(like),
            Doctor.specialization.ilike(like),
            Doctor.email.ilike(like),
        ))

    limit = current_app.config['DATA_LIMIT']
    pagination = query.order_by(Doctor.created_at.desc()).paginate(page=page, per_page=limit, error_out=False)
    return {
        'data': [d.to_dict(include_schedule=True) for d in pagination.items],
        'total_pages': pagination.pages,
        'total_records': pagination.total,
        'current_page': page,
    }


def list_staff(page=1, search=None):
    query = Staff.query
    if search:
        like = f"%{search}%"
        query = query.filter(db.or_(
            Staff.name.ilike(like),
            Staff.phone.ilike(like),
            Staff.email.ilike(like),
        ))

    limit = current_app.config['DATA_LIMIT']
    pagination = query.order_by(Staff.created_at.desc()).paginate(page=page, per_page=limit, error_out=False)
    return {
        'data': [s.to_dict() for s in pagination.items],
        'total_pages': pagination.pages,
        'total_records': pagination.total,
        'current_page': page,
    }


def _create_provider_account(name, email, password, role):
    if not email or not password:
        raise ServiceError('Email and password are required')
    valid, message = validate_password(password)
    if not valid:
        raise ServiceError(message)

    first_name, last_name = split_name(name)
    return identity_client.create_user(
        email=email,
        password=password,
        first_name=first_name,
        last_name=last_name,
        role=role,
    )


def _commit_or_remove_account(user_id, label):
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        try:
            identity_client.delete_user(user_id)
        except IdentityProviderError as e:
            current_app.logger.error(f"Could not remove provider user {user_id}: {e.message}")
        raise ConflictError(f'A {label} with this email already exists')


def create_new_doctor(data):
    """Creates the provider account and Doctor row from a validated DoctorForm."""
    user = _create_provider_account(data.name, str(data.email), data.password, 'doctor')

    doctor = Doctor(
        id=user['id'],
        email=str(data.email),
        name=data.name,
        specialization=data.specialization,
        license_number=data.license_number,
        phone=data.phone,
        address=data.address,
        department=data.department,
        img=data.img,
        type=data.type,
        color_code=random_color_code(),
    )
    for day in data.work_schedule or []:
        doctor.working_days.append(WorkingDay(
            day=day.day, start_time=day.start_time, close_time=day.close_time
        ))
    db.session.add(doctor)
    _commit_or_remove_account(doctor.id, 'doctor')

    current_app.logger.info(f"Doctor {doctor.id} created")
    return doctor


def create_new_staff(data):
    """Creates the provider account and Staff row from a validated StaffForm."""
    user = _create_provider_account(data.name, str(data.email), data.password, data.role.lower())

    staff = Staff(
        id=user['id'],
        email=str(data.email),
        name=data.name,
        phone=data.phone,
        address=data.address,
        department=data.department,
        license_number=data.license_number,
        img=data.img,
        role=data.role,
        color_code=random_color_code(),
    )
    db.session.add(staff)
    _commit_or_remove_account(staff.id, 'staff member')

    current_app.logger.info(f"Staff {staff.id} created with role {data.role}")
    return staff


def delete_data_by_id(record_id, delete_type):
    """Deletes a doctor, staff member, patient or payment.

    People are also removed from the identity provider; a provider failure is
    logged and does not undo the local delete.
    """
    if delete_type not in DELETE_TYPES:
        raise ServiceError(f"Invalid delete type: {delete_type}")

    if delete_type == 'payment':
        try:
            key = int(record_id)
        except (TypeError, ValueError):
            raise ServiceError('Invalid payment id')
        model = Payment
    else:
        key = record_id
        model = {'doctor': Doctor, 'staff': Staff, 'patient': Patient}[delete_type]

    row = db.session.get(model, key)
    if not row:
        raise NotFoundError(f"{delete_type.capitalize()} not found")

    db.session.delete(row)
    db.session.commit()

    if delete_type != 'payment':
        try:
            identity_client.delete_user(record_id)
        except IdentityProviderError as e:
            current_app.logger.warning(f"Identity provider user deletion failed for {record_id}: {e.message}")


def create_review(data):
    """Stores a rating from a validated ReviewForm."""
    if not db.session.get(Doctor, data.staff_id):
        raise NotFoundError('Doctor not found')
    if not db.session.get(Patient, data.patient_id):
        raise NotFoundError('Patient not found')

    rating = Rating(
        staff_id=data.staff_id,
        patient_id=data.patient_id,
        rating=data.rating,
        comment=data.comment,
    )
    db.session.add(rating)
    db.session.commit()
    return rating


def list_users(limit=100):
    """Provider accounts, newest first."""
    users = identity_client.list_users(order_by='-created_at', limit=limit)
    return {'data': users, 'total_count': len(users)}
