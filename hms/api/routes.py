# /hms/api/routes.py

from flask_jwt_extended import jwt_required
from . import api_bp
from hms.extensions import limiter
from hms.utils.decorators import audit_log, require_role
from .controllers import (
    auth_controller, admin_controller, patient_controller, doctor_controller,
    appointment_controller, medical_record_controller, clinical_notes_controller,
    billing_controller, notification_controller, profile_controller,
)

CARE_TEAM = ('admin', 'doctor', 'nurse')
BILLING_ROLES = ('admin', 'cashier')


# --- Authentication Endpoints ---
@api_bp.route('/auth/sync', methods=['POST'])
@jwt_required()
@limiter.limit("20 per minute")
@audit_log("USER_SYNC", "users")
def sync_user():
    return auth_controller.sync_user()


# --- User Profile Endpoints ---
@api_bp.route('/users/me', methods=['GET'])
@jwt_required()
@audit_log("VIEW_OWN_PROFILE", "users")
def get_current_user_route():
    return auth_controller.get_current_user_details()

@api_bp.route('/profile/picture', methods=['POST'])
@jwt_required()
@limiter.limit("10 per hour")
@audit_log("UPLOAD_PROFILE_PICTURE", "users")
def upload_profile_picture():
    return profile_controller.upload_profile_picture()

@api_bp.route('/profile/picture', methods=['DELETE'])
@jwt_required()
@audit_log("DELETE_PROFILE_PICTURE", "users")
def delete_profile_picture():
    return profile_controller.delete_profile_picture()


# --- Admin Endpoints ---
@api_bp.route('/admin/doctors', methods=['POST'])
@jwt_required()
@limiter.limit("10 per hour")
@audit_log("DOCTOR_REGISTRATION", "doctors")
@require_role('admin')
def create_doctor():
    return admin_controller.create_doctor()

@api_bp.route('/admin/staff', methods=['POST'])
@jwt_required()
@limiter.limit("10 per hour")
@audit_log("STAFF_REGISTRATION", "staff")
@require_role('admin')
def create_staff():
    return admin_controller.create_staff()

@api_bp.route('/admin/records/<string:record_id>', methods=['DELETE'])
@jwt_required()
@audit_log("DELETE_RECORD", "records")
@require_role('admin')
def delete_record(record_id):
    return admin_controller.delete_record(record_id)

@api_bp.route('/admin/users', methods=['GET'])
@jwt_required()
@audit_log("VIEW_ALL_USERS", "users")
@require_role('admin')
def list_users():
    return admin_controller.list_users()

@api_bp.route('/admin/dashboard', methods=['GET'])
@jwt_required()
@require_role('admin')
def admin_dashboard():
    return admin_controller.get_dashboard()


# --- Patient Endpoints ---
@api_bp.route('/patients/register', methods=['POST'])
@jwt_required()
@limiter.limit("10 per hour")
@audit_log("PATIENT_REGISTRATION", "patients")
def register_patient():
    return patient_controller.register_patient()

@api_bp.route('/patients', methods=['POST'])
@jwt_required()
@limiter.limit("30 per hour")
@audit_log("PATIENT_CREATE_FROM_FORM", "patients")
@require_role(*CARE_TEAM)
def create_patient():
    return patient_controller.create_patient_from_form()

@api_bp.route('/patients', methods=['GET'])
@jwt_required()
@audit_log("VIEW_ALL_PATIENTS", "patients")
@require_role(*CARE_TEAM)
def list_patients():
    return patient_controller.list_patients()

@api_bp.route('/patients/dashboard', methods=['GET'])
@jwt_required()
@require_role('patient')
def patient_dashboard():
    return patient_controller.get_dashboard()

@api_bp.route('/patients/<string:pid>', methods=['GET'])
@jwt_required()
@audit_log("VIEW_PATIENT", "patients")
def get_patient(pid):
    return patient_controller.get_patient(pid)

@api_bp.route('/patients/<string:pid>', methods=['PUT'])
@jwt_required()
@audit_log("UPDATE_PATIENT", "patients")
def update_patient(pid):
    return patient_controller.update_patient(pid)


# --- Doctor & Staff Endpoints ---
@api_bp.route('/doctors', methods=['GET'])
@jwt_required()
@audit_log("VIEW_ALL_DOCTORS", "doctors")
def list_doctors():
    return doctor_controller.list_doctors()

@api_bp.route('/doctors/dashboard', methods=['GET'])
@jwt_required()
@require_role('doctor')
def doctor_dashboard():
    return doctor_controller.get_dashboard()

@api_bp.route('/doctors/<string:doctor_id>', methods=['GET'])
@jwt_required()
@audit_log("VIEW_DOCTOR", "doctors")
def get_doctor(doctor_id):
    return doctor_controller.get_doctor(doctor_id)

@api_bp.route('/doctors/<string:doctor_id>/ratings', methods=['GET'])
@jwt_required()
def get_doctor_ratings(doctor_id):
    return doctor_controller.get_doctor_ratings(doctor_id)

@api_bp.route('/reviews', methods=['POST'])
@jwt_required()
@limiter.limit("10 per hour")
@audit_log("CREATE_REVIEW", "ratings")
@require_role('patient', 'admin')
def create_review():
    return doctor_controller.create_review()

@api_bp.route('/staff', methods=['GET'])
@jwt_required()
@audit_log("VIEW_ALL_STAFF", "staff")
@require_role('admin', 'doctor')
def list_staff():
    return doctor_controller.list_staff()


# --- Appointment Endpoints ---
@api_bp.route('/appointments', methods=['POST'])
@jwt_required()
@limiter.limit("30 per hour")
@audit_log("CREATE_APPOINTMENT", "appointments")
@require_role('patient', 'admin', 'nurse', 'doctor')
def create_appointment():
    return appointment_controller.create_appointment()

@api_bp.route('/appointments', methods=['GET'])
@jwt_required()
@audit_log("VIEW_APPOINTMENTS", "appointments")
def list_appointments():
    return appointment_controller.list_appointments()

@api_bp.route('/appointments/<int:appointment_id>', methods=['GET'])
@jwt_required()
@audit_log("VIEW_APPOINTMENT", "appointments")
def get_appointment(appointment_id):
    return appointment_controller.get_appointment(appointment_id)

@api_bp.route('/appointments/<int:appointment_id>/status', methods=['PATCH'])
@jwt_required()
@audit_log("UPDATE_APPOINTMENT_STATUS", "appointments")
def update_appointment_status(appointment_id):
    return appointment_controller.update_appointment_status(appointment_id)


# --- Medical Record Endpoints ---
@api_bp.route('/medical-records', methods=['POST'])
@jwt_required()
@audit_log("CREATE_MEDICAL_RECORD", "medical_records")
@require_role('doctor')
def create_medical_record():
    return medical_record_controller.create_medical_record()

@api_bp.route('/medical-records', methods=['GET'])
@jwt_required()
@audit_log("VIEW_MEDICAL_RECORDS", "medical_records")
@require_role('admin', 'doctor', 'nurse', 'patient')
def list_medical_records():
    return medical_record_controller.list_medical_records()

@api_bp.route('/medical-records/<int:record_id>', methods=['GET'])
@jwt_required()
@audit_log("VIEW_MEDICAL_RECORD", "medical_records")
@require_role('admin', 'doctor', 'nurse', 'patient')
def get_medical_record(record_id):
    return medical_record_controller.get_medical_record(record_id)


# --- Clinical Notes Endpoints ---
@api_bp.route('/medical-records/<int:record_id>/clinical-notes', methods=['GET'])
@jwt_required()
@audit_log("VIEW_CLINICAL_NOTES", "clinical_notes")
def get_clinical_notes(record_id):
    return clinical_notes_controller.get_clinical_notes(record_id)

@api_bp.route('/medical-records/<int:record_id>/clinical-notes', methods=['POST'])
@jwt_required()
@audit_log("CREATE_CLINICAL_NOTES_VERSION", "clinical_notes")
def create_clinical_notes_version(record_id):
    return clinical_notes_controller.create_clinical_notes_version(record_id)


# --- Billing Endpoints ---
@api_bp.route('/billing', methods=['POST'])
@jwt_required()
@audit_log("CREATE_BILL", "payments")
@require_role('admin', 'doctor', 'cashier')
def create_billing():
    return billing_controller.create_billing()

@api_bp.route('/billing', methods=['GET'])
@jwt_required()
@audit_log("VIEW_BILLS", "payments")
def list_payments():
    return billing_controller.list_payments()

@api_bp.route('/billing/appointment/<int:appointment_id>', methods=['GET'])
@jwt_required()
@audit_log("VIEW_BILL", "payments")
def get_billing_by_appointment(appointment_id):
    return billing_controller.get_billing_by_appointment(appointment_id)

@api_bp.route('/billing/<int:payment_id>', methods=['PATCH'])
@jwt_required()
@audit_log("UPDATE_PAYMENT", "payments")
@require_role(*BILLING_ROLES)
def update_payment(payment_id):
    return billing_controller.update_payment(payment_id)

@api_bp.route('/services', methods=['GET'])
@jwt_required()
def list_services():
    return billing_controller.list_services()


# --- Notification Endpoints ---
@api_bp.route('/notifications', methods=['GET'])
@jwt_required()
def list_notifications():
    return notification_controller.list_notifications()

@api_bp.route('/notifications/<int:notification_id>/read', methods=['PATCH'])
@jwt_required()
def mark_notification_read(notification_id):
    return notification_controller.mark_notification_read(notification_id)

@api_bp.route('/notifications/read-all', methods=['PATCH'])
@jwt_required()
def mark_all_notifications_read():
    return notification_controller.mark_all_notifications_read()
