# /hms/api/controllers/appointment_controller.py
from datetime import date

from flask import request, jsonify

from hms.schemas import AppointmentForm, AppointmentStatusForm
from hms.services import appointment as appointment_service
from hms.utils.decorators import current_role, current_user_id
from hms.utils.helpers import page_arg


def create_appointment():
    """Books an appointment for the caller, or for ``patient_id`` when staff book it."""
    form = AppointmentForm.model_validate(request.get_json(silent=True) or {})
    appointment = appointment_service.create_new_appointment(form, current_user_id(), current_role())
    return jsonify({
        'success': True,
        'message': 'Appointment booked successfully',
        'data': appointment.to_dict()
    }), 201


def update_appointment_status(appointment_id):
    form = AppointmentStatusForm.model_validate(request.get_json(silent=True) or {})
    message = appointment_service.appointment_action(
        appointment_id, form.status, form.reason, current_user_id(), current_role()
    )
    return jsonify({'success': True, 'message': message}), 200


def get_appointment(appointment_id):
    appointment = appointment_service.get_appointment_by_id(appointment_id)

    user_id, role = current_user_id(), current_role()
    if role == 'patient' and appointment.patient_id != user_id:
        return jsonify({'error': 'Permission denied'}), 403
    if role == 'doctor' and appointment.doctor_id != user_id:
        return jsonify({'error': 'Permission denied'}), 403

    return jsonify({'success': True, 'data': appointment.to_dict()}), 200


def list_appointments():
    date_filter = request.args.get('date')
    if date_filter:
        try:
            date_filter = date.fromisoformat(date_filter)
        except ValueError:
            return jsonify({'error': 'Invalid date, expected YYYY-MM-DD'}), 400

    result = appointment_service.get_patient_appointments(
        current_user_id(),
        current_role(),
        page=page_arg(request.args),
        search=request.args.get('search') or request.args.get('q'),
        id=request.args.get('id'),
        date=date_filter,
        status=request.args.get('status'),
    )
    return jsonify({'success': True, **result}), 200
