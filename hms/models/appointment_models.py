from datetime import datetime
from hms.extensions import db

APPOINTMENT_STATUSES = ('PENDING', 'SCHEDULED', 'COMPLETED', 'CANCELLED')


class Appointment(db.Model):
    """Model for storing appointment details between a doctor and a patient."""
    __tablename__ = 'appointments'

    id = db.Column(db.Integer, primary_key=True)

    patient_id = db.Column(db.String(255), db.ForeignKey('patients.id'), nullable=False, index=True)
    doctor_id = db.Column(db.String(255), db.ForeignKey('doctors.id'), nullable=False, index=True)

    # Appointment details
    appointment_date = db.Column(db.Date, nullable=False)
    time = db.Column(db.String(10), nullable=False)
    status = db.Column(db.String(20), nullable=False, default='PENDING')  # see APPOINTMENT_STATUSES
    type = db.Column(db.String(100), nullable=False)
    note = db.Column(db.Text)
    reason = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    patient = db.relationship('Patient', back_populates='appointments')
    doctor = db.relationship('Doctor', back_populates='appointments')
    medical_records = db.relationship('MedicalRecord', back_populates='appointment', cascade="all, delete-orphan")
    payment = db.relationship('Payment', back_populates='appointment', uselist=False, cascade="all, delete-orphan")

    def to_dict(self, include_people=True):
        result = {
            'id': self.id,
            'patient_id': self.patient_id,
            'doctor_id': self.doctor_id,
            'appointment_date': self.appointment_date.isoformat(),
            'time': self.time,
            'status': self.status,
            'type': self.type,
            'note': self.note,
            'reason': self.reason,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_people:
            result['patient'] = self.patient.to_dict(include_private=False) if self.patient else None
            result['doctor'] = self.doctor.to_dict() if self.doctor else None
        return result
