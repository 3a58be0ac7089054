# /hms/api/controllers/clinical_notes_controller.py
from flask import request, jsonify

from hms.schemas import ClinicalNotesForm
from hms.services import clinical_notes
from hms.services.medical import get_medical_record_by_id
from hms.utils.decorators import current_role, current_user_id


def get_clinical_notes(record_id):
    """Full version history of a record's notes, newest first."""
    if current_role() == 'patient':
        record = get_medical_record_by_id(record_id)
        if record.patient_id != current_user_id():
            return jsonify({'error': 'Permission denied'}), 403

    versions = clinical_notes.list_versions(record_id)
    return jsonify({'success': True, 'data': [v.to_dict() for v in versions]}), 200


def create_clinical_notes_version(record_id):
    if current_role() != 'doctor':
        return jsonify({'error': 'Only doctors can edit clinical notes'}), 403

    data = request.get_json(silent=True) or {}
    notes = data.get('notes')
    if not isinstance(notes, str) or not notes.strip():
        return jsonify({'error': 'Notes are required'}), 400

    form = ClinicalNotesForm.model_validate(data)
    version = clinical_notes.create_version(record_id, form.notes, form.change_reason)
    return jsonify({'success': True, 'data': version.to_dict()}), 201
