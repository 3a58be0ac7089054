# /hms/services/patients.py
"""Patient registration and profile updates.

Patient rows are keyed by the identity provider's user id, so every create
path first obtains a provider account and then writes the row.
"""
from flask import current_app
from sqlalchemy.exc import IntegrityError

from hms.extensions import db
from hms.models.patient_models import Patient
from hms.services.identity import generate_temporary_password, identity_client
from hms.utils.email_util import send_credentials_email
from hms.utils.exceptions import ConflictError, IdentityProviderError, NotFoundError, ServiceError
from hms.utils.helpers import random_color_code

NEW_PATIENT = 'new-patient'

_PROFILE_FIELDS = (
    'first_name', 'last_name', 'date_of_birth', 'gender', 'phone', 'email', 'address',
    'marital_status', 'emergency_contact_name', 'emergency_contact_number', 'relation',
    'blood_group', 'allergies', 'medical_conditions', 'medical_history',
    'insurance_provider', 'img',
)


def _apply_form(patient, data, partial=False):
    """Copies form fields onto the row. With ``partial`` only the fields the
    request actually sent are written, so omitted fields keep their values."""
    sent = data.model_fields_set if partial else None
    for field in _PROFILE_FIELDS:
        if sent is not None and field not in sent:
            continue
        value = getattr(data, field)
        if field == 'img' and value is None:
            continue
        setattr(patient, field, str(value) if field == 'email' else value)
    if sent is None or 'insurance_number' in sent:
        patient.set_insurance_number(data.insurance_number)


def _save_new_patient(patient, provider_user_created):
    """Commits a new row; a freshly created provider account is removed if that fails."""
    db.session.add(patient)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        if provider_user_created:
            try:
                identity_client.delete_user(patient.id)
            except IdentityProviderError as e:
                current_app.logger.error(f"Could not remove provider user {patient.id}: {e.message}")
        raise ConflictError('A patient with this email already exists')


def create_new_patient(data, pid):
    """Registers a patient from a validated PatientCreateForm.

    ``pid`` is the signed-in user's provider id for self-registration, or
    ``new-patient`` to create the provider account as well.
    """
    created = False
    if pid == NEW_PATIENT:
        user = identity_client.create_user(
            email=str(data.email),
            password=generate_temporary_password(),
            first_name=data.first_name,
            last_name=data.last_name,
            role='patient',
        )
        patient_id = user['id']
        created = True
    else:
        if db.session.get(Patient, pid):
            raise ConflictError('Patient already registered')
        identity_client.update_user(pid, role='patient')
        patient_id = pid

    patient = Patient(
        id=patient_id,
        color_code=random_color_code(),
        privacy_consent=bool(data.privacy_consent),
        service_consent=bool(data.service_consent),
        medical_consent=bool(data.medical_consent),
    )
    _apply_form(patient, data)
    _save_new_patient(patient, created)

    current_app.logger.info(f"Patient {patient.id} registered")
    return patient


def create_patient_from_form(data):
    """Staff-side registration: creates the provider account with a temporary
    password, writes the row and emails the credentials."""
    if not data.email or not data.phone:
        raise ServiceError('Email and phone number are required')

    password = generate_temporary_password()
    user = identity_client.create_user(
        email=str(data.email),
        password=password,
        first_name=data.first_name,
        last_name=data.last_name,
        role='patient',
    )

    patient = Patient(
        id=user['id'],
        color_code=random_color_code(),
        privacy_consent=bool(data.privacy_consent),
        service_consent=bool(data.service_consent),
        medical_consent=bool(data.medical_consent),
    )
    _apply_form(patient, data)
    _save_new_patient(patient, True)

    if not send_credentials_email(str(data.email), patient.name, password):
        current_app.logger.warning(f"Credentials email for patient {patient.id} was not sent")

    current_app.logger.info(f"Patient {patient.id} registered from form")
    return patient


def update_patient(data, pid):
    """Updates a patient's profile from a validated PatientForm. Consents are left as they are."""
    patient = db.session.get(Patient, pid)
    if not patient:
        raise NotFoundError('Patient not found')

    identity_client.update_user(pid, first_name=data.first_name, last_name=data.last_name)

    _apply_form(patient, data, partial=True)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError('A patient with this email already exists')
    return patient


def get_patient_by_id(pid):
    patient = db.session.get(Patient, pid)
    if not patient:
        raise NotFoundError('Patient not found')
    return patient


def list_patients(page=1, search=None):
    query = Patient.query
    if search:
        like = f"%{search}%"
        query = query.filter(db.or_(
            Patient.first_name.ilike(like),
            Patient.last_name.ilike(like),
            Patient.phone.ilike(like),
            Patient.email.ilike(like),
        ))

    limit = current_app.config['DATA_LIMIT']
    pagination = query.order_by(Patient.created_at.desc()).paginate(page=page, per_page=limit, error_out=False)
    return {
        'data': [p.to_dict(include_private=False) for p in pagination.items],
        'total_pages': pagination.pages,
        'total_records': pagination.total,
        'current_page': page,
    }
