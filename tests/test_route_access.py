import pytest

from hms.route_access import allowed_roles, is_allowed


class TestRouteTable:
    @pytest.mark.parametrize('path, roles', [
        ('/', ['admin', 'doctor', 'patient', 'sign-in']),
        ('/admin', ['admin']),
        ('/admin/settings', ['admin']),
        ('/doctor', ['doctor']),
        ('/staff/queue', ['nurse', 'lab_technician', 'cashier']),
        ('/record/users', ['admin']),
        ('/record/doctors', ['admin']),
        ('/record/doctors/user_doctor_1', ['admin', 'doctor']),
        ('/record/staffs', ['admin', 'doctor']),
        ('/record/patients', ['admin', 'doctor', 'nurse']),
    ])
    def test_first_matching_entry_wins(self, path, roles):
        assert allowed_roles(path) == roles

    def test_patient_prefix_shadows_registrations_entry(self):
        # "/patient(.*)" is listed first, so it decides for "/patient/registrations"
        assert allowed_roles('/patient/registrations') == ['patient', 'admin', 'doctor', 'nurse']

    def test_patterns_are_anchored(self):
        assert allowed_roles('/record/users/extra') is None
        assert allowed_roles('/x/admin') is None

    def test_unlisted_paths_are_open(self):
        assert allowed_roles('/notifications') is None
        assert is_allowed('/notifications', 'sign-in')

    def test_is_allowed(self):
        assert is_allowed('/admin', 'admin')
        assert not is_allowed('/admin', 'doctor')
        assert not is_allowed('/doctor', 'sign-in')


class TestRouteGuard:
    def test_anonymous_home_is_served(self, client):
        response = client.get('/')
        assert response.status_code == 200
        assert response.get_json()['links']['sign_in'] == '/sign-in'

    def test_anonymous_user_is_sent_to_sign_in(self, client):
        response = client.get('/admin')
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/sign-in')

    def test_sign_in_page_returns_provider_url(self, client, app):
        response = client.get('/sign-in')
        assert response.status_code == 200
        assert response.get_json()['sign_in_url'] == app.config['IDENTITY_SIGN_IN_URL']

    @pytest.mark.parametrize('path', ['/', '/sign-in', '/sign-up'])
    def test_signed_in_user_is_sent_to_dashboard(self, client, auth_headers, path):
        response = client.get(path, headers=auth_headers('user_doctor_1', 'doctor'))
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/doctor')

    def test_disallowed_role_is_sent_to_own_dashboard(self, client, auth_headers):
        response = client.get('/admin', headers=auth_headers('user_doctor_1', 'doctor'))
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/doctor')

    def test_token_without_role_counts_as_patient(self, client, auth_headers):
        response = client.get('/', headers=auth_headers('user_abc'))
        assert response.headers['Location'].endswith('/patient')

        response = client.get('/doctor', headers=auth_headers('user_abc'))
        assert response.headers['Location'].endswith('/patient')

    def test_role_claim_is_case_insensitive(self, client, auth_headers):
        response = client.get('/', headers=auth_headers('user_admin', 'ADMIN'))
        assert response.headers['Location'].endswith('/admin')

    def test_invalid_token_is_treated_as_anonymous(self, client):
        response = client.get('/admin', headers={'Authorization': 'Bearer not-a-token'})
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/sign-in')

    def test_session_cookie_is_accepted(self, client, auth_headers):
        token = auth_headers('user_admin', 'admin')['Authorization'].split(' ', 1)[1]
        client.set_cookie('__session', token)
        response = client.get('/admin')
        assert response.status_code == 200
        assert 'total_patients' in response.get_json()

    def test_allowed_role_reaches_page(self, client, auth_headers, make_doctor):
        doctor = make_doctor()
        response = client.get(f'/record/doctors/{doctor.id}', headers=auth_headers(doctor.id, 'doctor'))
        assert response.status_code == 200
        assert response.get_json()['doctor']['id'] == doctor.id

    def test_doctor_cannot_list_all_doctors_page(self, client, auth_headers):
        response = client.get('/record/doctors', headers=auth_headers('user_doctor_1', 'doctor'))
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/doctor')

    def test_api_paths_are_not_redirected(self, client):
        response = client.get('/api/doctors')
        assert response.status_code == 401
        assert response.get_json() == {'error': 'Unauthorized'}

    def test_unregistered_patient_is_pointed_at_registration(self, client, auth_headers):
        response = client.get('/patient', headers=auth_headers('user_new', 'patient'))
        assert response.status_code == 200
        assert response.get_json()['registered'] is False

    def test_notifications_page_requires_sign_in(self, client):
        response = client.get('/notifications')
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/sign-in')
