# /hms/api/controllers/patient_controller.py
from flask import request, jsonify

from hms.schemas import PatientCreateForm, PatientForm
from hms.services import dashboard, patients as patient_service
from hms.services.patients import NEW_PATIENT
from hms.utils.decorators import current_role, current_user_id
from hms.utils.helpers import page_arg

# Roles allowed to manage other people's patient records
CARE_TEAM_ROLES = ('admin', 'doctor', 'nurse')


def _can_access(pid):
    return pid == current_user_id() or current_role() in CARE_TEAM_ROLES


def register_patient():
    """Self-registration, or ``pid=new-patient`` for the care team to register someone else."""
    data = request.get_json(silent=True) or {}
    pid = request.args.get('pid') or data.pop('pid', None) or current_user_id()

    if pid == NEW_PATIENT:
        if current_role() not in CARE_TEAM_ROLES:
            return jsonify({'error': 'Permission denied'}), 403
    elif pid != current_user_id() and current_role() != 'admin':
        return jsonify({'error': 'You can only register yourself'}), 403

    form = PatientCreateForm.model_validate(data)
    patient = patient_service.create_new_patient(form, pid)
    return jsonify({
        'success': True,
        'message': 'Patient created successfully',
        'data': patient.to_dict()
    }), 201


def create_patient_from_form():
    form = PatientForm.model_validate(request.get_json(silent=True) or {})
    patient = patient_service.create_patient_from_form(form)
    return jsonify({
        'success': True,
        'message': 'Patient created successfully',
        'data': patient.to_dict()
    }), 201


def update_patient(pid):
    if not _can_access(pid):
        return jsonify({'error': 'Permission denied'}), 403

    form = PatientForm.model_validate(request.get_json(silent=True) or {})
    patient = patient_service.update_patient(form, pid)
    return jsonify({
        'success': True,
        'message': 'Patient info updated successfully',
        'data': patient.to_dict()
    }), 200


def get_patient(pid):
    if not _can_access(pid):
        return jsonify({'error': 'Permission denied'}), 403
    patient = patient_service.get_patient_by_id(pid)
    return jsonify({'success': True, 'data': patient.to_dict()}), 200


def list_patients():
    result = patient_service.list_patients(page=page_arg(request.args), search=request.args.get('q'))
    return jsonify({'success': True, **result}), 200


def get_dashboard():
    stats = dashboard.get_patient_dashboard_stats(current_user_id())
    return jsonify({'success': True, 'data': stats}), 200
