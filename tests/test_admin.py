from decimal import Decimal

import pytest

from hms.extensions import db
from hms.models.billing_models import Payment
from hms.models.patient_models import Patient
from hms.models.system_models import AuditLog
from hms.models.user_models import Doctor, Staff
from hms.utils.exceptions import IdentityProviderError


def _doctor_payload(**overrides):
    payload = {
        'name': 'Temitope Adeyemi Bello',
        'phone': '08022223333',
        'email': 'temi@example.com',
        'address': '22 Broad Street, Lagos',
        'specialization': 'Cardiology',
        'license_number': 'MDCN-0042',
        'type': 'FULL',
        'department': 'Cardiology',
        'password': 'Secur3!pass',
        'work_schedule': [
            {'day': 'monday', 'start_time': '08:00', 'close_time': '16:00'},
            {'day': 'thursday', 'start_time': '10:00', 'close_time': '18:00'},
        ],
    }
    payload.update(overrides)
    return payload


def _staff_payload(**overrides):
    payload = {
        'name': 'Grace Eze',
        'role': 'LAB_TECHNICIAN',
        'phone': '08099990000',
        'email': 'grace@example.com',
        'address': '3 Allen Avenue, Ikeja',
        'department': 'Laboratory',
        'password': 'Lab0ratory!',
    }
    payload.update(overrides)
    return payload


class TestCreateDoctor:
    def test_admin_creates_doctor_with_schedule(self, client, auth_headers, identity):
        response = client.post('/api/admin/doctors', json=_doctor_payload(), headers=auth_headers('user_admin', 'admin'))

        assert response.status_code == 201
        body = response.get_json()['data']
        assert body['id'] == 'user_new_1'
        assert [d['day'] for d in body['working_days']] == ['monday', 'thursday']

        identity.create_user.assert_called_once_with(
            email='temi@example.com',
            password='Secur3!pass',
            first_name='Temitope',
            last_name='Adeyemi Bello',
            role='doctor',
        )

    def test_weak_password_is_rejected(self, client, auth_headers, identity):
        response = client.post(
            '/api/admin/doctors', json=_doctor_payload(password='password1'), headers=auth_headers('user_admin', 'admin')
        )
        assert response.status_code == 400
        identity.create_user.assert_not_called()

    def test_non_admin_is_denied(self, client, auth_headers, identity):
        response = client.post('/api/admin/doctors', json=_doctor_payload(), headers=auth_headers('user_doc', 'doctor'))
        assert response.status_code == 403
        assert Doctor.query.count() == 0

    def test_duplicate_email_removes_new_provider_user(self, client, auth_headers, identity, make_doctor):
        make_doctor(email='temi@example.com')
        response = client.post('/api/admin/doctors', json=_doctor_payload(), headers=auth_headers('user_admin', 'admin'))

        assert response.status_code == 409
        identity.delete_user.assert_called_once_with('user_new_1')

    def test_provider_errors_are_passed_through(self, client, auth_headers, identity):
        identity.create_user.side_effect = IdentityProviderError(
            'Password must be at least 8 characters and contain letters, numbers, and symbols',
            code='PASSWORD_POLICY', status_code=400,
        )
        response = client.post('/api/admin/doctors', json=_doctor_payload(), headers=auth_headers('user_admin', 'admin'))
        assert response.status_code == 400
        assert 'Password' in response.get_json()['error']


class TestCreateStaff:
    def test_staff_role_is_lowercased_for_provider(self, client, auth_headers, identity):
        response = client.post('/api/admin/staff', json=_staff_payload(), headers=auth_headers('user_admin', 'admin'))

        assert response.status_code == 201
        assert response.get_json()['data']['role'] == 'LAB_TECHNICIAN'
        assert identity.create_user.call_args.kwargs['role'] == 'lab_technician'

    def test_password_is_required(self, client, auth_headers, identity):
        payload = _staff_payload()
        payload.pop('password')
        response = client.post('/api/admin/staff', json=payload, headers=auth_headers('user_admin', 'admin'))

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Email and password are required'

    def test_unknown_staff_role_fails_validation(self, client, auth_headers, identity):
        response = client.post(
            '/api/admin/staff', json=_staff_payload(role='JANITOR'), headers=auth_headers('user_admin', 'admin')
        )
        assert response.status_code == 400


class TestDeleteRecord:
    def test_delete_doctor_also_removes_provider_user(self, client, auth_headers, identity, make_doctor):
        doctor = make_doctor()
        response = client.delete(
            f'/api/admin/records/{doctor.id}?type=doctor', headers=auth_headers('user_admin', 'admin')
        )

        assert response.status_code == 200
        assert db.session.get(Doctor, doctor.id) is None
        identity.delete_user.assert_called_once_with(doctor.id)

    def test_provider_failure_does_not_undo_delete(self, client, auth_headers, identity, make_staff):
        staff = make_staff()
        identity.delete_user.side_effect = IdentityProviderError('Identity provider is unavailable', code='UNAVAILABLE')

        response = client.delete(f'/api/admin/records/{staff.id}?type=staff', headers=auth_headers('user_admin', 'admin'))
        assert response.status_code == 200
        assert db.session.get(Staff, staff.id) is None

    def test_delete_patient(self, client, auth_headers, identity, make_patient):
        patient = make_patient()
        response = client.delete(
            f'/api/admin/records/{patient.id}?type=patient', headers=auth_headers('user_admin', 'admin')
        )
        assert response.status_code == 200
        assert db.session.get(Patient, patient.id) is None

    def test_delete_payment_skips_provider(self, client, auth_headers, identity, make_patient, make_doctor,
                                          make_appointment):
        patient = make_patient()
        appointment = make_appointment(patient, make_doctor())
        payment = Payment(
            appointment_id=appointment.id, patient_id=patient.id,
            subtotal=Decimal('10.00'), total_amount=Decimal('10.00'),
        )
        db.session.add(payment)
        db.session.commit()

        response = client.delete(
            f'/api/admin/records/{payment.id}?type=payment', headers=auth_headers('user_admin', 'admin')
        )
        assert response.status_code == 200
        assert Payment.query.count() == 0
        identity.delete_user.assert_not_called()

    def test_invalid_type(self, client, auth_headers, identity):
        response = client.delete('/api/admin/records/abc?type=ward', headers=auth_headers('user_admin', 'admin'))
        assert response.status_code == 400

    def test_missing_record(self, client, auth_headers, identity):
        response = client.delete('/api/admin/records/user_ghost?type=doctor', headers=auth_headers('user_admin', 'admin'))
        assert response.status_code == 404
        identity.delete_user.assert_not_called()

    def test_deletes_are_audited(self, client, auth_headers, identity, make_doctor):
        doctor = make_doctor()
        client.delete(f'/api/admin/records/{doctor.id}?type=doctor', headers=auth_headers('user_admin', 'admin'))

        entry = AuditLog.query.filter_by(action='DELETE_RECORD').one()
        assert entry.user_id == 'user_admin'
        assert entry.resource_id == doctor.id
        assert entry.success is True


class TestUsersAndReviews:
    def test_list_provider_users(self, client, auth_headers, identity):
        identity.list_users.return_value = [
            {'id': 'user_1', 'first_name': 'A', 'last_name': 'B', 'email': 'a@example.com', 'role': 'doctor',
             'last_sign_in_at': None, 'created_at': 1},
        ]
        response = client.get('/api/admin/users?limit=5', headers=auth_headers('user_admin', 'admin'))

        assert response.status_code == 200
        assert response.get_json()['total_count'] == 1
        identity.list_users.assert_called_once_with(order_by='-created_at', limit=5)

    def test_reviews_and_average_rating(self, client, auth_headers, make_patient, make_doctor):
        doctor = make_doctor()
        first, second = make_patient(), make_patient()

        for patient, rating in ((first, 5), (second, 4)):
            response = client.post(
                '/api/reviews',
                json={'patient_id': patient.id, 'staff_id': doctor.id, 'rating': rating, 'comment': 'Very attentive'},
                headers=auth_headers(patient.id, 'patient'),
            )
            assert response.status_code == 201

        body = client.get(f'/api/doctors/{doctor.id}/ratings', headers=auth_headers(first.id, 'patient')).get_json()
        assert body['total_rating'] == 2
        assert body['average_rating'] == 4.5

    def test_doctor_without_ratings(self, client, auth_headers, make_doctor):
        doctor = make_doctor()
        body = client.get(f'/api/doctors/{doctor.id}/ratings', headers=auth_headers('user_x', 'patient')).get_json()
        assert body['total_rating'] == 0
        assert body['average_rating'] == 0.0

    def test_patient_reviews_only_as_self(self, client, auth_headers, make_patient, make_doctor):
        doctor, patient = make_doctor(), make_patient()
        response = client.post(
            '/api/reviews',
            json={'patient_id': patient.id, 'staff_id': doctor.id, 'rating': 1, 'comment': 'Impersonation'},
            headers=auth_headers('user_other', 'patient'),
        )
        assert response.status_code == 403

    def test_rating_out_of_range(self, client, auth_headers, make_patient, make_doctor):
        doctor, patient = make_doctor(), make_patient()
        response = client.post(
            '/api/reviews',
            json={'patient_id': patient.id, 'staff_id': doctor.id, 'rating': 6, 'comment': 'Great'},
            headers=auth_headers(patient.id, 'patient'),
        )
        assert response.status_code == 400

    def test_get_doctor_counts_appointments(self, client, auth_headers, make_patient, make_doctor, make_appointment):
        doctor = make_doctor(working_days=('monday',))
        patient = make_patient()
        make_appointment(patient, doctor)
        make_appointment(patient, doctor)

        body = client.get(f'/api/doctors/{doctor.id}', headers=auth_headers(patient.id, 'patient')).get_json()
        assert body['total_appointment'] == 2
        assert body['data']['working_days'][0]['day'] == 'monday'


class TestSyncUser:
    @pytest.mark.parametrize('role, model', [('doctor', Doctor), ('patient', Patient), ('nurse', Staff)])
    def test_creates_placeholder_row(self, client, auth_headers, identity, role, model):
        identity.get_user.return_value = {
            'id': 'user_sync', 'first_name': 'Kemi', 'last_name': 'Ade', 'email': 'kemi@example.com', 'role': role,
        }
        response = client.post('/api/auth/sync', headers=auth_headers('user_sync', role))

        assert response.status_code == 200
        assert response.get_json()['message'] == 'User synced with database successfully'
        assert db.session.get(model, 'user_sync') is not None

    def test_existing_row_is_left_alone(self, client, auth_headers, identity, make_doctor):
        doctor = make_doctor()
        identity.get_user.return_value = {'id': doctor.id, 'role': 'doctor'}

        response = client.post('/api/auth/sync', headers=auth_headers(doctor.id, 'doctor'))
        assert response.get_json()['message'] == 'User already exists in database'

    def test_missing_role(self, client, auth_headers, identity):
        identity.get_user.return_value = {'id': 'user_sync', 'role': None}
        response = client.post('/api/auth/sync', headers=auth_headers('user_sync'))
        assert response.status_code == 400
        assert response.get_json()['error'] == 'User role not found'

    def test_admin_has_no_local_row(self, client, auth_headers, identity):
        identity.get_user.return_value = {'id': 'user_admin', 'role': 'admin'}
        response = client.post('/api/auth/sync', headers=auth_headers('user_admin', 'admin'))
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Invalid user role'

    def test_current_user_details(self, client, auth_headers, make_doctor):
        doctor = make_doctor(working_days=('friday',))
        body = client.get('/api/users/me', headers=auth_headers(doctor.id, 'doctor')).get_json()

        assert body['role'] == 'doctor'
        assert body['profile']['working_days'][0]['day'] == 'friday'

        body = client.get('/api/users/me', headers=auth_headers('user_admin', 'admin')).get_json()
        assert body['profile'] is None
