# /hms/services/billing.py
"""Invoices for appointments: line items, tax, discount and payment status."""
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from flask import current_app
from sqlalchemy.exc import IntegrityError

from hms.extensions import db
from hms.models.appointment_models import Appointment
from hms.models.billing_models import Payment, PatientBill, Service, SERVICE_TYPES
from hms.models.patient_models import Patient
from hms.services.notifications import notify
from hms.utils.exceptions import ConflictError, NotFoundError, ServiceError

CENT = Decimal('0.01')


def _to_money(value):
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_totals(lines, tax_rate=0, discount=0):
    """Sums ``lines`` (each with ``unit_cost`` and ``quantity``) into invoice totals.

    subtotal = sum(unit_cost * quantity)
    tax      = subtotal * tax_rate / 100
    total    = subtotal + tax - discount
    """
    subtotal = sum(
        (_to_money(line['unit_cost']) * int(line['quantity']) for line in lines),
        Decimal('0')
    )
    subtotal = _to_money(subtotal)
    tax_amount = _to_money(subtotal * Decimal(str(tax_rate)) / Decimal('100'))
    discount = _to_money(discount)
    total = _to_money(subtotal + tax_amount - discount)
    return {
        'subtotal': subtotal,
        'tax_amount': tax_amount,
        'discount': discount,
        'total_amount': total,
    }


def create_billing_record(appointment_id, patient_id, services, discount=0, tax_rate=0, notes=""):
    """Creates the Payment for an appointment together with its PatientBill rows.

    ``services`` is a list of dicts with ``service_id``, ``quantity`` and the
    optional medication fields. Everything is written in one transaction.
    """
    if not services:
        raise ServiceError('At least one service is required')

    appointment = db.session.get(Appointment, appointment_id)
    if not appointment:
        raise NotFoundError('Appointment not found')
    if appointment.patient_id != patient_id:
        raise ServiceError('Appointment does not belong to this patient')
    if Payment.query.filter_by(appointment_id=appointment_id).first():
        raise ConflictError('A bill already exists for this appointment')

    service_ids = {int(item['service_id']) for item in services}
    catalogue = {s.id: s for s in Service.query.filter(Service.id.in_(service_ids)).all()}
    missing = sorted(service_ids - set(catalogue))
    if missing:
        raise ServiceError(f"Unknown service id(s): {', '.join(str(i) for i in missing)}")

    lines = []
    for item in services:
        service = catalogue[int(item['service_id'])]
        quantity = int(item.get('quantity') or 1)
        if quantity < 1:
            raise ServiceError('Quantity must be at least 1')
        unit_cost = _to_money(service.price)
        lines.append({
            'service': service,
            'quantity': quantity,
            'unit_cost': unit_cost,
            'total_cost': _to_money(unit_cost * quantity),
            'medication_name': item.get('medication_name'),
            'dosage': item.get('dosage'),
            'instructions': item.get('instructions'),
        })

    totals = calculate_totals(lines, tax_rate=tax_rate, discount=discount)
    if totals['total_amount'] < 0:
        raise ServiceError('Discount cannot exceed the bill amount')

    now = datetime.utcnow()
    payment = Payment(
        patient_id=patient_id,
        appointment_id=appointment_id,
        bill_date=now,
        payment_date=now,
        amount_paid=Decimal('0.00'),
        status='UNPAID',
        notes=notes or '',
        **totals
    )
    for line in lines:
        payment.bills.append(PatientBill(
            service_id=line['service'].id,
            service_date=now,
            quantity=line['quantity'],
            unit_cost=line['unit_cost'],
            total_cost=line['total_cost'],
            medication_name=line['medication_name'],
            dosage=line['dosage'],
            instructions=line['instructions'],
        ))

    db.session.add(payment)
    notify(
        patient_id, 'billing', 'New bill',
        f"A bill of {totals['total_amount']} has been generated for your appointment."
    )
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError('A bill already exists for this appointment')

    current_app.logger.info(
        f"Created bill {payment.id} for appointment {appointment_id}: total {totals['total_amount']}"
    )
    return payment


def get_billing_by_appointment(appointment_id):
    payment = Payment.query.filter_by(appointment_id=appointment_id).first()
    if not payment:
        raise NotFoundError('No bill found for this appointment')
    return payment


def update_payment_status(payment_id, status, amount_paid, payment_method=None, receipt_number=None):
    payment = db.session.get(Payment, payment_id)
    if not payment:
        raise NotFoundError('Payment not found')

    payment.status = status
    payment.amount_paid = _to_money(amount_paid)
    payment.payment_date = datetime.utcnow()
    if payment_method:
        payment.payment_method = payment_method
    if receipt_number:
        payment.receipt_number = receipt_number

    db.session.commit()
    return payment


def get_services_by_type(service_type=None):
    query = Service.query
    if service_type:
        service_type = service_type.upper()
        if service_type not in SERVICE_TYPES:
            raise ServiceError(f"Invalid service type: {service_type}")
        query = query.filter_by(service_type=service_type)
    return query.order_by(Service.service_name.asc()).all()


def list_payments(page=1, search=None, patient_id=None):
    """Paginated payments, newest first."""
    query = Payment.query.join(Patient)
    if patient_id:
        query = query.filter(Payment.patient_id == patient_id)
    if search:
        like = f"%{search}%"
        query = query.filter(db.or_(
            Patient.first_name.ilike(like),
            Patient.last_name.ilike(like),
            Payment.patient_id.ilike(like),
        ))

    limit = current_app.config['DATA_LIMIT']
    pagination = query.order_by(Payment.bill_date.desc(), Payment.id.desc()).paginate(
        page=page, per_page=limit, error_out=False
    )
    return {
        'data': [p.to_dict(include_items=False) for p in pagination.items],
        'total_pages': pagination.pages,
        'total_records': pagination.total,
        'current_page': page,
    }
