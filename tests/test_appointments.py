from datetime import date, timedelta

import pytest

from hms.extensions import db
from hms.models.appointment_models import Appointment
from hms.models.system_models import Notification


@pytest.fixture
def people(make_patient, make_doctor):
    return make_patient(first_name='Ada', last_name='Obi'), make_doctor(name='Dr Ngozi Eze')


class TestBooking:
    def test_patient_books_for_self(self, client, auth_headers, people):
        patient, doctor = people
        response = client.post(
            '/api/appointments',
            json={'doctor_id': doctor.id, 'type': 'Consultation', 'appointment_date': '2026-11-02',
                  'time': '09:30', 'note': 'Recurring headaches', 'patient_id': 'someone_else'},
            headers=auth_headers(patient.id, 'patient'),
        )

        assert response.status_code == 201
        body = response.get_json()
        assert body['message'] == 'Appointment booked successfully'
        assert body['data']['patient_id'] == patient.id
        assert body['data']['status'] == 'PENDING'
        assert body['data']['appointment_date'] == '2026-11-02'

    def test_doctor_is_notified(self, client, auth_headers, people):
        patient, doctor = people
        client.post(
            '/api/appointments',
            json={'doctor_id': doctor.id, 'type': 'Consultation', 'appointment_date': '2026-11-02', 'time': '09:30'},
            headers=auth_headers(patient.id, 'patient'),
        )
        notification = Notification.query.filter_by(user_id=doctor.id).one()
        assert notification.type == 'appointment'
        assert 'Ada Obi' in notification.message

    def test_admin_books_for_patient(self, client, auth_headers, people):
        patient, doctor = people
        response = client.post(
            '/api/appointments',
            json={'doctor_id': doctor.id, 'patient_id': patient.id, 'type': 'Review',
                  'appointment_date': '2026-11-03', 'time': '11:00'},
            headers=auth_headers('user_admin', 'admin'),
        )
        assert response.status_code == 201
        assert response.get_json()['data']['patient_id'] == patient.id

    def test_admin_must_name_patient(self, client, auth_headers, people):
        _, doctor = people
        response = client.post(
            '/api/appointments',
            json={'doctor_id': doctor.id, 'type': 'Review', 'appointment_date': '2026-11-03', 'time': '11:00'},
            headers=auth_headers('user_admin', 'admin'),
        )
        assert response.status_code == 400

    def test_unknown_doctor(self, client, auth_headers, people):
        patient, _ = people
        response = client.post(
            '/api/appointments',
            json={'doctor_id': 'nope', 'type': 'Review', 'appointment_date': '2026-11-03', 'time': '11:00'},
            headers=auth_headers(patient.id, 'patient'),
        )
        assert response.status_code == 404

    def test_invalid_date_fails_validation(self, client, auth_headers, people):
        patient, doctor = people
        response = client.post(
            '/api/appointments',
            json={'doctor_id': doctor.id, 'type': 'Review', 'appointment_date': 'next tuesday', 'time': '11:00'},
            headers=auth_headers(patient.id, 'patient'),
        )
        assert response.status_code == 400
        assert Appointment.query.count() == 0


class TestAppointmentAction:
    def _set(self, client, headers, appointment, status, reason=None):
        return client.patch(
            f'/api/appointments/{appointment.id}/status',
            json={'status': status, 'reason': reason},
            headers=headers,
        )

    def test_patient_cancels_own_appointment(self, client, auth_headers, people, make_appointment):
        patient, doctor = people
        appointment = make_appointment(patient, doctor)

        response = self._set(client, auth_headers(patient.id, 'patient'), appointment, 'CANCELLED', 'Travelling')
        assert response.status_code == 200
        assert response.get_json()['message'] == 'Appointment cancelled successfully'

        db.session.refresh(appointment)
        assert appointment.status == 'CANCELLED'
        assert appointment.reason == 'Travelling'

    def test_patient_cannot_schedule(self, client, auth_headers, people, make_appointment):
        patient, doctor = people
        appointment = make_appointment(patient, doctor)

        response = self._set(client, auth_headers(patient.id, 'patient'), appointment, 'SCHEDULED')
        assert response.status_code == 403
        db.session.refresh(appointment)
        assert appointment.status == 'PENDING'

    def test_doctor_of_appointment_sets_any_status(self, client, auth_headers, people, make_appointment):
        patient, doctor = people
        appointment = make_appointment(patient, doctor, status='COMPLETED')

        # No state machine: a completed appointment can go back to pending
        response = self._set(client, auth_headers(doctor.id, 'doctor'), appointment, 'PENDING')
        assert response.status_code == 200
        assert response.get_json()['message'] == 'Appointment pending successfully'

    def test_other_doctor_is_denied(self, client, auth_headers, people, make_appointment, make_doctor):
        patient, doctor = people
        appointment = make_appointment(patient, doctor)
        response = self._set(client, auth_headers(make_doctor().id, 'doctor'), appointment, 'SCHEDULED')
        assert response.status_code == 403

    @pytest.mark.parametrize('role', ['admin', 'nurse'])
    def test_admin_and_nurse_manage_any(self, client, auth_headers, people, make_appointment, role):
        patient, doctor = people
        appointment = make_appointment(patient, doctor)
        response = self._set(client, auth_headers(f'user_{role}', role), appointment, 'SCHEDULED')
        assert response.get_json()['message'] == 'Appointment scheduled successfully'

    def test_patient_is_notified(self, client, auth_headers, people, make_appointment):
        patient, doctor = people
        appointment = make_appointment(patient, doctor)
        self._set(client, auth_headers(doctor.id, 'doctor'), appointment, 'SCHEDULED')

        assert Notification.query.filter_by(user_id=patient.id, type='appointment').count() == 1

    def test_unknown_status_is_rejected(self, client, auth_headers, people, make_appointment):
        patient, doctor = people
        appointment = make_appointment(patient, doctor)
        response = self._set(client, auth_headers(doctor.id, 'doctor'), appointment, 'RESCHEDULED')
        assert response.status_code == 400

    def test_missing_appointment(self, client, auth_headers):
        response = client.patch(
            '/api/appointments/777/status', json={'status': 'CANCELLED'}, headers=auth_headers('user_admin', 'admin')
        )
        assert response.status_code == 404


class TestListing:
    @pytest.fixture
    def schedule(self, make_patient, make_doctor, make_appointment):
        ada = make_patient(first_name='Ada', last_name='Obi')
        ben = make_patient(first_name='Ben', last_name='Okafor')
        eze = make_doctor(name='Dr Ngozi Eze')
        ike = make_doctor(name='Dr Chidi Ike')
        today = date.today()
        return {
            'ada': ada, 'ben': ben, 'eze': eze, 'ike': ike,
            'a1': make_appointment(ada, eze, appointment_date=today),
            'a2': make_appointment(ada, ike, appointment_date=today + timedelta(days=1), status='SCHEDULED'),
            'a3': make_appointment(ben, eze, appointment_date=today, status='CANCELLED'),
        }

    def _ids(self, response):
        return sorted(a['id'] for a in response.get_json()['data'])

    def test_patient_sees_own(self, client, auth_headers, schedule):
        response = client.get('/api/appointments', headers=auth_headers(schedule['ada'].id, 'patient'))
        assert self._ids(response) == sorted([schedule['a1'].id, schedule['a2'].id])

    def test_patient_cannot_widen_scope(self, client, auth_headers, schedule):
        response = client.get(
            f"/api/appointments?id={schedule['ben'].id}", headers=auth_headers(schedule['ada'].id, 'patient')
        )
        assert self._ids(response) == sorted([schedule['a1'].id, schedule['a2'].id])

    def test_doctor_defaults_to_own(self, client, auth_headers, schedule):
        response = client.get('/api/appointments', headers=auth_headers(schedule['eze'].id, 'doctor'))
        assert self._ids(response) == sorted([schedule['a1'].id, schedule['a3'].id])

    def test_doctor_with_patient_id(self, client, auth_headers, schedule):
        response = client.get(
            f"/api/appointments?id={schedule['ada'].id}", headers=auth_headers(schedule['eze'].id, 'doctor')
        )
        assert self._ids(response) == sorted([schedule['a1'].id, schedule['a2'].id])

    def test_nurse_without_id_sees_all(self, client, auth_headers, schedule):
        response = client.get('/api/appointments', headers=auth_headers('user_nurse', 'nurse'))
        assert response.get_json()['total_records'] == 3

    def test_admin_filters(self, client, auth_headers, schedule):
        headers = auth_headers('user_admin', 'admin')

        response = client.get('/api/appointments?status=cancelled', headers=headers)
        assert self._ids(response) == [schedule['a3'].id]

        response = client.get(f'/api/appointments?date={date.today().isoformat()}', headers=headers)
        assert self._ids(response) == sorted([schedule['a1'].id, schedule['a3'].id])

        response = client.get('/api/appointments?search=Ike', headers=headers)
        assert self._ids(response) == [schedule['a2'].id]

        response = client.get('/api/appointments?search=okafor', headers=headers)
        assert self._ids(response) == [schedule['a3'].id]

    def test_bad_date_filter(self, client, auth_headers, schedule):
        response = client.get('/api/appointments?date=yesterday', headers=auth_headers('user_admin', 'admin'))
        assert response.status_code == 400

    def test_cashier_cannot_list(self, client, auth_headers, schedule):
        response = client.get('/api/appointments', headers=auth_headers('user_cashier', 'cashier'))
        assert response.status_code == 403

    def test_get_one_includes_people(self, client, auth_headers, schedule):
        a1 = schedule['a1']
        response = client.get(f'/api/appointments/{a1.id}', headers=auth_headers(schedule['ada'].id, 'patient'))
        body = response.get_json()['data']
        assert body['patient']['name'] == 'Ada Obi'
        assert body['doctor']['name'] == 'Dr Ngozi Eze'

        response = client.get(f'/api/appointments/{a1.id}', headers=auth_headers(schedule['ben'].id, 'patient'))
        assert response.status_code == 403
