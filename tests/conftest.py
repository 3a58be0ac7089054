"""
Shared pytest fixtures for all tests.

The app runs with TestingConfig: SQLite in memory, HS256 session tokens
minted locally, rate limits off. The identity provider client is replaced
with mocks so no test talks to the network.
"""
from datetime import date
from decimal import Decimal
from itertools import count
from unittest.mock import MagicMock

import pytest
from flask_jwt_extended import create_access_token

from hms import create_app
from hms.extensions import db
from hms.models.appointment_models import Appointment
from hms.models.billing_models import Service
from hms.models.medical_models import MedicalRecord
from hms.models.patient_models import Patient
from hms.models.user_models import Doctor, Staff, WorkingDay
from hms.services.identity import identity_client


# ============================================================================
# APPLICATION FIXTURES
# ============================================================================


@pytest.fixture
def app():
    """Application with a fresh in-memory database and an active app context."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    """Builds Authorization headers for a provider user id and role.

    ``role=None`` mints a token without a role claim.
    """
    def _headers(user_id, role=None):
        claims = {'metadata': {'role': role}} if role else {}
        token = create_access_token(identity=user_id, additional_claims=claims)
        return {'Authorization': f'Bearer {token}'}
    return _headers


# ============================================================================
# IDENTITY PROVIDER MOCK
# ============================================================================


@pytest.fixture
def identity(monkeypatch):
    """Replaces every outbound identity provider call with a MagicMock."""
    ids = count(1)

    def _create_user(email, password, first_name, last_name, role):
        return {
            'id': f'user_new_{next(ids)}',
            'first_name': first_name,
            'last_name': last_name,
            'email': email,
            'role': role,
            'last_sign_in_at': None,
            'created_at': 1700000000000,
        }

    def _update_user(user_id, first_name=None, last_name=None, role=None):
        return {'id': user_id, 'first_name': first_name, 'last_name': last_name,
                'email': None, 'role': role, 'last_sign_in_at': None, 'created_at': None}

    mocks = {
        'create_user': MagicMock(side_effect=_create_user),
        'update_user': MagicMock(side_effect=_update_user),
        'delete_user': MagicMock(return_value=None),
        'get_user': MagicMock(),
        'list_users': MagicMock(return_value=[]),
    }
    for name, mock in mocks.items():
        monkeypatch.setattr(identity_client, name, mock)
    return MagicMock(**mocks)


# ============================================================================
# ROW FACTORIES
# ============================================================================


@pytest.fixture
def make_patient(app):
    seq = count(1)

    def _make(id=None, first_name='Jane', last_name='Doe', **overrides):
        n = next(seq)
        values = dict(
            id=id or f'user_patient_{n}',
            first_name=first_name,
            last_name=last_name,
            date_of_birth=date(1990, 5, 17),
            gender='FEMALE',
            phone='08012345678',
            email=f'patient{n}@example.com',
            marital_status='single',
            address='12 Hospital Road',
            emergency_contact_name='John Doe',
            emergency_contact_number='08087654321',
            relation='father',
            privacy_consent=True,
            service_consent=True,
            medical_consent=True,
        )
        values.update(overrides)
        patient = Patient(**values)
        db.session.add(patient)
        db.session.commit()
        return patient
    return _make


@pytest.fixture
def make_doctor(app):
    seq = count(1)

    def _make(id=None, name='Dr Gregory House', working_days=(), **overrides):
        n = next(seq)
        values = dict(
            id=id or f'user_doctor_{n}',
            name=name,
            email=f'doctor{n}@example.com',
            specialization='Diagnostics',
            license_number=f'LIC-{n:04d}',
            phone='08011112222',
            address='Princeton Plainsboro',
            department='Medicine',
            type='FULL',
        )
        values.update(overrides)
        doctor = Doctor(**values)
        for day in working_days:
            doctor.working_days.append(WorkingDay(day=day, start_time='08:00', close_time='17:00'))
        db.session.add(doctor)
        db.session.commit()
        return doctor
    return _make


@pytest.fixture
def make_staff(app):
    seq = count(1)

    def _make(id=None, role='NURSE', **overrides):
        n = next(seq)
        values = dict(
            id=id or f'user_staff_{n}',
            name='Carla Espinosa',
            email=f'staff{n}@example.com',
            phone='08033334444',
            address='Sacred Heart Hospital',
            role=role,
        )
        values.update(overrides)
        staff = Staff(**values)
        db.session.add(staff)
        db.session.commit()
        return staff
    return _make


@pytest.fixture
def make_appointment(app):
    def _make(patient, doctor, appointment_date=None, status='PENDING', type='General', time='10:00'):
        appointment = Appointment(
            patient_id=patient.id,
            doctor_id=doctor.id,
            appointment_date=appointment_date or date.today(),
            time=time,
            type=type,
            status=status,
        )
        db.session.add(appointment)
        db.session.commit()
        return appointment
    return _make


@pytest.fixture
def make_medical_record(app):
    def _make(appointment, notes=None):
        record = MedicalRecord(
            patient_id=appointment.patient_id,
            appointment_id=appointment.id,
            doctor_id=appointment.doctor_id,
            treatment_plan='Rest and fluids',
            notes=notes,
        )
        db.session.add(record)
        db.session.commit()
        return record
    return _make


@pytest.fixture
def services(app):
    """A small billing catalogue keyed by name."""
    catalogue = {
        'consultation': Service(service_name='General Consultation', price=Decimal('50.00'), service_type='CONSULTATION'),
        'amoxicillin': Service(service_name='Amoxicillin 500mg', price=Decimal('15.00'), service_type='MEDICATION'),
        'ibuprofen': Service(service_name='Ibuprofen 400mg', price=Decimal('8.00'), service_type='MEDICATION'),
        'xray': Service(service_name='X-Ray', price=Decimal('75.00'), service_type='PROCEDURE'),
    }
    db.session.add_all(catalogue.values())
    db.session.commit()
    return catalogue
