# /hms/services/auth.py
from datetime import date

from flask import current_app

from hms.extensions import db
from hms.models.patient_models import Patient
from hms.models.user_models import Doctor, Staff, STAFF_IDENTITY_ROLES
from hms.services.identity import identity_client
from hms.utils.exceptions import ServiceError
from hms.utils.helpers import random_color_code


def _model_for_role(role):
    if role == 'doctor':
        return Doctor
    if role == 'patient':
        return Patient
    if role in STAFF_IDENTITY_ROLES:
        return Staff
    return None


def find_profile(user_id, role):
    """The local Doctor / Patient / Staff row for a signed-in user, if any."""
    model = _model_for_role(role)
    return db.session.get(model, user_id) if model else None


def sync_user_with_database(user_id):
    """Makes sure a provider account has its matching local row.

    Missing rows are created with placeholder values that the user fills in
    later. Returns a status message.
    """
    user = identity_client.get_user(user_id)
    role = (user.get('role') or '').lower()
    if not role:
        raise ServiceError('User role not found')

    model = _model_for_role(role)
    if model is None:
        raise ServiceError('Invalid user role')

    if db.session.get(model, user_id):
        return 'User already exists in database'

    full_name = f"{user.get('first_name') or ''} {user.get('last_name') or ''}".strip()
    email = user.get('email') or ''

    if model is Doctor:
        row = Doctor(
            id=user_id, name=full_name, email=email, phone='', specialization='',
            address='', type='FULL', department='', license_number='',
            color_code=random_color_code(),
        )
    elif model is Patient:
        row = Patient(
            id=user_id,
            first_name=user.get('first_name') or '',
            last_name=user.get('last_name') or '',
            email=email, phone='', address='', date_of_birth=date.today(), gender='MALE',
            marital_status='single', emergency_contact_name='', emergency_contact_number='',
            relation='other', color_code=random_color_code(),
            privacy_consent=False, service_consent=False, medical_consent=False,
        )
    else:
        row = Staff(
            id=user_id, name=full_name, email=email, phone='', address='',
            role=role.upper(), department='', license_number='',
            color_code=random_color_code(),
        )

    db.session.add(row)
    db.session.commit()
    current_app.logger.info(f"Synced provider user {user_id} as {role}")
    return 'User synced with database successfully'
