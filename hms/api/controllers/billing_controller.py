# /hms/api/controllers/billing_controller.py
from flask import request, jsonify

from hms.schemas import BillingForm, PaymentUpdateForm
from hms.services import billing as billing_service
from hms.utils.decorators import current_role, current_user_id
from hms.utils.helpers import page_arg


def create_billing():
    form = BillingForm.model_validate(request.get_json(silent=True) or {})
    payment = billing_service.create_billing_record(
        appointment_id=form.appointment_id,
        patient_id=form.patient_id,
        services=[item.model_dump() for item in form.services],
        discount=form.discount,
        tax_rate=form.tax_rate,
        notes=form.notes,
    )
    return jsonify({
        'success': True,
        'message': 'Billing record created successfully',
        'data': payment.to_dict()
    }), 201


def get_billing_by_appointment(appointment_id):
    payment = billing_service.get_billing_by_appointment(appointment_id)
    if current_role() == 'patient' and payment.patient_id != current_user_id():
        return jsonify({'error': 'Permission denied'}), 403
    return jsonify({'success': True, 'data': payment.to_dict()}), 200


def update_payment(payment_id):
    form = PaymentUpdateForm.model_validate(request.get_json(silent=True) or {})
    payment = billing_service.update_payment_status(
        payment_id,
        form.status,
        form.amount_paid,
        payment_method=form.payment_method,
        receipt_number=form.receipt_number,
    )
    return jsonify({
        'success': True,
        'message': 'Payment updated successfully',
        'data': payment.to_dict()
    }), 200


def list_payments():
    patient_id = current_user_id() if current_role() == 'patient' else request.args.get('patient_id')
    result = billing_service.list_payments(
        page=page_arg(request.args),
        search=request.args.get('q'),
        patient_id=patient_id,
    )
    return jsonify({'success': True, **result}), 200


def list_services():
    services = billing_service.get_services_by_type(request.args.get('type'))
    return jsonify({'success': True, 'data': [s.to_dict() for s in services]}), 200
