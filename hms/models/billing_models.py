from datetime import datetime
from decimal import Decimal
from hms.extensions import db

SERVICE_TYPES = ('CONSULTATION', 'LAB_TEST', 'MEDICATION', 'PROCEDURE', 'OTHER')

# Default catalogue loaded by `flask seed-services`
DEFAULT_SERVICES = [
    {'service_name': 'General Consultation', 'description': 'Standard doctor consultation', 'price': Decimal('50.00'), 'service_type': 'CONSULTATION'},
    {'service_name': 'Specialist Consultation', 'description': 'Specialist doctor consultation', 'price': Decimal('100.00'), 'service_type': 'CONSULTATION'},
    {'service_name': 'Amoxicillin 500mg', 'description': 'Antibiotic medication', 'price': Decimal('15.00'), 'service_type': 'MEDICATION'},
    {'service_name': 'Ibuprofen 400mg', 'description': 'Pain relief medication', 'price': Decimal('8.00'), 'service_type': 'MEDICATION'},
    {'service_name': 'Blood Test', 'description': 'Complete blood count', 'price': Decimal('25.00'), 'service_type': 'LAB_TEST'},
    {'service_name': 'X-Ray', 'description': 'Chest X-Ray examination', 'price': Decimal('75.00'), 'service_type': 'PROCEDURE'},
]


def _money(value):
    return float(value) if value is not None else None


class Service(db.Model):
    """Billable service or medication with its unit price."""
    __tablename__ = 'services'

    id = db.Column(db.Integer, primary_key=True)
    service_name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    service_type = db.Column(db.String(20), nullable=False, default='OTHER')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'service_name': self.service_name,
            'description': self.description,
            'price': _money(self.price),
            'service_type': self.service_type,
        }


class Payment(db.Model):
    """Invoice for one appointment, aggregating its bill line items."""
    __tablename__ = 'payments'

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.String(255), db.ForeignKey('patients.id'), nullable=False, index=True)
    appointment_id = db.Column(db.Integer, db.ForeignKey('appointments.id'), nullable=False, unique=True)

    bill_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    payment_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    subtotal = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    tax_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    discount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    total_amount = db.Column(db.Numeric(10, 2), nullable=False)
    amount_paid = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    payment_method = db.Column(db.String(10), default='CASH')
    status = db.Column(db.String(10), nullable=False, default='UNPAID')
    receipt_number = db.Column(db.String(50))
    notes = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    patient = db.relationship('Patient', back_populates='payments')
    appointment = db.relationship('Appointment', back_populates='payment')
    bills = db.relationship('PatientBill', back_populates='payment', cascade="all, delete-orphan")

    def to_dict(self, include_items=True):
        result = {
            'id': self.id,
            'patient_id': self.patient_id,
            'appointment_id': self.appointment_id,
            'bill_date': self.bill_date.isoformat() if self.bill_date else None,
            'payment_date': self.payment_date.isoformat() if self.payment_date else None,
            'subtotal': _money(self.subtotal),
            'tax_amount': _money(self.tax_amount),
            'discount': _money(self.discount),
            'total_amount': _money(self.total_amount),
            'amount_paid': _money(self.amount_paid),
            'payment_method': self.payment_method,
            'status': self.status,
            'receipt_number': self.receipt_number,
            'notes': self.notes,
        }
        if include_items:
            result['patient'] = self.patient.to_dict(include_private=False) if self.patient else None
            result['bills'] = [item.to_dict() for item in self.bills]
        return result


class PatientBill(db.Model):
    """One billed line: a service (or medication) with quantity and cost."""
    __tablename__ = 'patient_bills'

    id = db.Column(db.Integer, primary_key=True)
    bill_id = db.Column(db.Integer, db.ForeignKey('payments.id'), nullable=False, index=True)
    service_id = db.Column(db.Integer, db.ForeignKey('services.id'), nullable=False)
    service_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    unit_cost = db.Column(db.Numeric(10, 2), nullable=False)
    total_cost = db.Column(db.Numeric(10, 2), nullable=False)
    medication_name = db.Column(db.String(255))
    dosage = db.Column(db.String(255))
    instructions = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    payment = db.relationship('Payment', back_populates='bills')
    service = db.relationship('Service')

    def to_dict(self):
        return {
            'id': self.id,
            'service_id': self.service_id,
            'service': self.service.to_dict() if self.service else None,
            'service_date': self.service_date.isoformat() if self.service_date else None,
            'quantity': self.quantity,
            'unit_cost': _money(self.unit_cost),
            'total_cost': _money(self.total_cost),
            'medication_name': self.medication_name,
            'dosage': self.dosage,
            'instructions': self.instructions,
        }
