# /hms/api/controllers/doctor_controller.py
from flask import request, jsonify

from hms.schemas import ReviewForm
from hms.services import dashboard, doctors as doctor_service
from hms.utils.decorators import current_role, current_user_id
from hms.utils.helpers import page_arg


def list_doctors():
    result = doctor_service.list_doctors(page=page_arg(request.args), search=request.args.get('q'))
    return jsonify({'success': True, **result}), 200


def get_doctor(doctor_id):
    doctor, total_appointments = doctor_service.get_doctor_by_id(doctor_id)
    return jsonify({
        'success': True,
        'data': doctor.to_dict(include_schedule=True),
        'total_appointment': total_appointments
    }), 200


def get_doctor_ratings(doctor_id):
    return jsonify({'success': True, **doctor_service.get_rating_by_id(doctor_id)}), 200


def list_staff():
    result = doctor_service.list_staff(page=page_arg(request.args), search=request.args.get('q'))
    return jsonify({'success': True, **result}), 200


def get_dashboard():
    stats = dashboard.get_doctor_dashboard_stats(current_user_id())
    return jsonify({'success': True, 'data': stats}), 200


def create_review():
    form = ReviewForm.model_validate(request.get_json(silent=True) or {})
    if current_role() != 'admin' and form.patient_id != current_user_id():
        return jsonify({'error': 'You can only review as yourself'}), 403

    rating = doctor_service.create_review(form)
    return jsonify({
        'success': True,
        'message': 'Review created successfully',
        'data': rating.to_dict()
    }), 201
