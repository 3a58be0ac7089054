# /hms/services/identity.py
"""Client for the hosted identity provider's backend API.

Users sign in with the provider; this service only creates, updates and
deletes provider accounts on behalf of admins and mirrors the role kept in
the account's public metadata.
"""
import re
import secrets
import string
import requests
from flask import current_app
from hms.utils.exceptions import IdentityProviderError

PASSWORD_SPECIAL_CHARACTERS = '@$!%*?&'

# Provider validation codes mapped to (our code, user-facing message)
_PROVIDER_ERRORS = {
    'form_password_policy_violation': (
        'PASSWORD_POLICY',
        'Password must be at least 8 characters and contain letters, numbers, and symbols'
    ),
    'form_password_pwned': (
        'PASSWORD_POLICY',
        'Password must be at least 8 characters and contain letters, numbers, and symbols'
    ),
    'form_identifier_exists': ('EMAIL_EXISTS', 'A user with this email already exists'),
    'form_identifier_invalid': ('INVALID_EMAIL', 'Please enter a valid email address'),
}
_NAME_PARAM_ERRORS = {
    'first_name': ('INVALID_FIRST_NAME', 'First name is required and must be at least 2 characters'),
    'last_name': ('INVALID_LAST_NAME', 'Last name is required and must be at least 2 characters'),
}


def validate_password(password):
    """Checks a password against the provider's policy. Returns (valid, message)."""
    if len(password) < 8:
        return False, 'Password must be at least 8 characters long'
    if not re.search(r'[a-zA-Z]', password):
        return False, 'Password must contain at least one letter'
    if not re.search(r'\d', password):
        return False, 'Password must contain at least one number'
    if not any(c in PASSWORD_SPECIAL_CHARACTERS for c in password):
        return False, f'Password must contain at least one special character ({PASSWORD_SPECIAL_CHARACTERS})'
    return True, None


def generate_temporary_password(length=12):
    """Random password that satisfies the provider's policy."""
    all_chars = string.ascii_letters + string.digits + PASSWORD_SPECIAL_CHARACTERS
    while True:
        password = ''.join(secrets.choice(all_chars) for _ in range(length))
        if (any(c.islower() for c in password) and any(c.isupper() for c in password)
                and any(c.isdigit() for c in password)
                and any(c in PASSWORD_SPECIAL_CHARACTERS for c in password)):
            return password


def split_name(name):
    """'Jane Mary Doe' -> ('Jane', 'Mary Doe'); a single word has an empty last name."""
    parts = name.strip().split(' ')
    return parts[0] or '', ' '.join(parts[1:])


def translate_provider_error(payload):
    """Turns a provider error body into (code, message)."""
    errors = payload.get('errors') if isinstance(payload, dict) else None
    if not errors:
        return 'UNKNOWN_ERROR', 'Failed to create user account'

    for err in errors:
        code = err.get('code')
        if code in _PROVIDER_ERRORS:
            return _PROVIDER_ERRORS[code]
        if code == 'form_param_invalid':
            param = (err.get('meta') or {}).get('param_name')
            if param in _NAME_PARAM_ERRORS:
                return _NAME_PARAM_ERRORS[param]

    return 'UNKNOWN_ERROR', errors[0].get('message') or 'Failed to create user account'


def _normalize_user(data):
    emails = data.get('email_addresses') or []
    metadata = data.get('public_metadata') or {}
    return {
        'id': data.get('id'),
        'first_name': data.get('first_name'),
        'last_name': data.get('last_name'),
        'email': emails[0].get('email_address') if emails else None,
        'role': metadata.get('role'),
        'last_sign_in_at': data.get('last_sign_in_at'),
        'created_at': data.get('created_at'),
    }


class IdentityProviderClient:
    """Thin wrapper over the provider's REST backend API."""

    def __init__(self, app=None):
        self.base_url = None
        self.secret_key = None
        self.timeout = 10
        self.session = requests.Session()
        if app:
            self.init_app(app)

    def init_app(self, app):
        self.base_url = app.config['IDENTITY_API_URL'].rstrip('/')
        self.secret_key = app.config.get('IDENTITY_SECRET_KEY')
        self.timeout = app.config.get('IDENTITY_TIMEOUT', 10)

    def _request(self, method, path, **kwargs):
        if not self.secret_key:
            raise IdentityProviderError('Identity provider is not configured', code='NOT_CONFIGURED')

        headers = {'Authorization': f'Bearer {self.secret_key}'}
        try:
            response = self.session.request(
                method, f'{self.base_url}{path}', headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            current_app.logger.error(f"Identity provider request failed: {method} {path}: {e}")
            raise IdentityProviderError('Identity provider is unavailable', code='UNAVAILABLE')

        if response.status_code == 404:
            raise IdentityProviderError('User not found', code='NOT_FOUND', status_code=404)

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            code, message = translate_provider_error(payload)
            current_app.logger.error(
                f"Identity provider error: {method} {path} -> {response.status_code} {code}"
            )
            if code == 'EMAIL_EXISTS':
                status_code = 409
            elif response.status_code in (400, 422):
                status_code = 400
            else:
                status_code = None
            raise IdentityProviderError(message, code=code, status_code=status_code)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def get_user(self, user_id):
        return _normalize_user(self._request('GET', f'/users/{user_id}'))

    def list_users(self, order_by='-created_at', email=None, limit=100):
        params = {'order_by': order_by, 'limit': limit}
        if email:
            params['email_address'] = [email]
        data = self._request('GET', '/users', params=params) or []
        # Some API versions wrap the list as {"data": [...], "total_count": n}
        if isinstance(data, dict):
            data = data.get('data') or []
        return [_normalize_user(u) for u in data]

    def create_user(self, email, password, first_name, last_name, role):
        """Creates a provider account with ``role`` in its public metadata."""
        if self.list_users(email=email, limit=1):
            raise IdentityProviderError('A user with this email already exists', code='EMAIL_EXISTS', status_code=409)

        payload = {
            'email_address': [email],
            'password': password,
            'first_name': first_name,
            'last_name': last_name,
            'public_metadata': {'role': role},
        }
        user = _normalize_user(self._request('POST', '/users', json=payload))
        current_app.logger.info(f"Created identity provider user {user['id']} with role '{role}'")
        return user

    def update_user(self, user_id, first_name=None, last_name=None, role=None):
        payload = {}
        if first_name is not None:
            payload['first_name'] = first_name
        if last_name is not None:
            payload['last_name'] = last_name
        if role is not None:
            payload['public_metadata'] = {'role': role}
        return _normalize_user(self._request('PATCH', f'/users/{user_id}', json=payload))

    def delete_user(self, user_id):
        self._request('DELETE', f'/users/{user_id}')
        current_app.logger.info(f"Deleted identity provider user {user_id}")


identity_client = IdentityProviderClient()
