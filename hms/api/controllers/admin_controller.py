# /hms/api/controllers/admin_controller.py
from flask import request, jsonify

from hms.schemas import DoctorForm, StaffForm
from hms.services import dashboard, doctors as doctor_service


def create_doctor():
    data = DoctorForm.model_validate(request.get_json(silent=True) or {})
    doctor = doctor_service.create_new_doctor(data)
    return jsonify({
        'success': True,
        'message': 'Doctor added successfully',
        'data': doctor.to_dict(include_schedule=True)
    }), 201


def create_staff():
    data = StaffForm.model_validate(request.get_json(silent=True) or {})
    staff = doctor_service.create_new_staff(data)
    return jsonify({
        'success': True,
        'message': 'Staff added successfully',
        'data': staff.to_dict()
    }), 201


def delete_record(record_id):
    delete_type = request.args.get('type', '').lower()
    doctor_service.delete_data_by_id(record_id, delete_type)
    return jsonify({'success': True, 'message': 'Data deleted successfully'}), 200


def list_users():
    limit = request.args.get('limit', 100, type=int)
    result = doctor_service.list_users(limit=max(1, min(limit, 500)))
    return jsonify({'success': True, **result}), 200


def get_dashboard():
    return jsonify({'success': True, 'data': dashboard.get_admin_dashboard_stats()}), 200
