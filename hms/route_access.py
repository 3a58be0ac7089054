# /hms/route_access.py
"""Which roles may open which page paths.

Entries are checked in order and the first matching pattern decides. A
``(.*)`` suffix matches any remainder of the path.
"""
import re

SIGN_IN_ROLE = 'sign-in'

ROUTE_ACCESS = [
    ('/', ['admin', 'doctor', 'patient', SIGN_IN_ROLE]),
    ('/admin(.*)', ['admin']),
    ('/patient(.*)', ['patient', 'admin', 'doctor', 'nurse']),
    ('/doctor(.*)', ['doctor']),
    ('/staff(.*)', ['nurse', 'lab_technician', 'cashier']),
    ('/record/users', ['admin']),
    ('/record/doctors', ['admin']),
    ('/record/doctors(.*)', ['admin', 'doctor']),
    ('/record/staffs', ['admin', 'doctor']),
    ('/record/patients', ['admin', 'doctor', 'nurse']),
    ('/patient/registrations', ['patient']),
]

_MATCHERS = [(re.compile(f'^{pattern}$'), roles) for pattern, roles in ROUTE_ACCESS]


def allowed_roles(path):
    """Roles of the first entry matching ``path``, or None when no entry matches."""
    for matcher, roles in _MATCHERS:
        if matcher.match(path):
            return roles
    return None


def is_allowed(path, role):
    roles = allowed_roles(path)
    return roles is None or role in roles
