# /hms/pages/routes.py
"""Page endpoints for the role dashboards.

Access is decided by the route guard before these views run, so each view
only gathers the data its page shows.
"""
from flask import current_app, g, jsonify, redirect, request

from . import pages_bp
from hms.extensions import db
from hms.models.patient_models import Patient
from hms.services import dashboard, doctors as doctor_service, notifications, patients as patient_service
from hms.utils.helpers import page_arg


@pages_bp.route('/')
def home():
    return jsonify({
        'name': 'Hospital Management System',
        'links': {'sign_in': '/sign-in', 'sign_up': '/sign-up'},
    }), 200


@pages_bp.route('/sign-in')
@pages_bp.route('/sign-up')
def sign_in():
    return jsonify({'sign_in_url': current_app.config['IDENTITY_SIGN_IN_URL']}), 200


@pages_bp.route('/admin')
def admin_page():
    return jsonify(dashboard.get_admin_dashboard_stats()), 200


@pages_bp.route('/doctor')
def doctor_page():
    return jsonify(dashboard.get_doctor_dashboard_stats(g.user_id)), 200


@pages_bp.route('/patient')
def patient_page():
    user_id = g.user_id
    if not db.session.get(Patient, user_id):
        return jsonify({'registered': False, 'registration_url': '/patient/registration'}), 200
    stats = dashboard.get_patient_dashboard_stats(user_id)
    stats['registered'] = True
    return jsonify(stats), 200


@pages_bp.route('/patient/registration')
def patient_registration_page():
    patient = db.session.get(Patient, g.user_id)
    return jsonify({'patient': patient.to_dict() if patient else None}), 200


@pages_bp.route('/staff')
def staff_page():
    return jsonify({
        'available_doctors': dashboard.available_doctors(),
    }), 200


@pages_bp.route('/record/users')
def users_page():
    return jsonify(doctor_service.list_users()), 200


@pages_bp.route('/record/doctors')
def doctors_page():
    return jsonify(doctor_service.list_doctors(page=page_arg(request.args), search=request.args.get('q'))), 200


@pages_bp.route('/record/doctors/<string:doctor_id>')
def doctor_detail_page(doctor_id):
    doctor, total_appointments = doctor_service.get_doctor_by_id(doctor_id)
    return jsonify({
        'doctor': doctor.to_dict(include_schedule=True),
        'total_appointment': total_appointments,
        'ratings': doctor_service.get_rating_by_id(doctor_id),
    }), 200


@pages_bp.route('/record/staffs')
def staff_list_page():
    return jsonify(doctor_service.list_staff(page=page_arg(request.args), search=request.args.get('q'))), 200


@pages_bp.route('/record/patients')
def patients_page():
    return jsonify(patient_service.list_patients(page=page_arg(request.args), search=request.args.get('q'))), 200


@pages_bp.route('/notifications')
def notifications_page():
    user_id = g.user_id
    if not user_id:
        return redirect('/sign-in')
    return jsonify(notifications.list_notifications(user_id)), 200
