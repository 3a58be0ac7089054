# /hms/api/controllers/medical_record_controller.py
from flask import request, jsonify

from hms.schemas import MedicalRecordForm
from hms.services import medical as medical_service
from hms.utils.decorators import current_role, current_user_id
from hms.utils.helpers import page_arg


def create_medical_record():
    form = MedicalRecordForm.model_validate(request.get_json(silent=True) or {})
    if form.doctor_id != current_user_id():
        return jsonify({'error': 'Doctors can only file records for their own appointments'}), 403

    record = medical_service.create_medical_record(form)
    return jsonify({
        'success': True,
        'message': 'Medical record created successfully',
        'data': record.to_dict()
    }), 201


def list_medical_records():
    patient_id = current_user_id() if current_role() == 'patient' else request.args.get('patient_id')
    result = medical_service.get_all_medical_records(
        page=page_arg(request.args),
        search=request.args.get('search') or request.args.get('q'),
        patient_id=patient_id,
    )
    return jsonify({'success': True, **result}), 200


def get_medical_record(record_id):
    record = medical_service.get_medical_record_by_id(record_id)
    if current_role() == 'patient' and record.patient_id != current_user_id():
        return jsonify({'error': 'Permission denied'}), 403
    return jsonify({'success': True, 'data': record.to_dict()}), 200
