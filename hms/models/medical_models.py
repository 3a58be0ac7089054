from datetime import datetime
from hms.extensions import db


class MedicalRecord(db.Model):
    """Container row linking a completed appointment to diagnosis, vital signs and notes."""
    __tablename__ = 'medical_records'

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.String(255), db.ForeignKey('patients.id'), nullable=False, index=True)
    appointment_id = db.Column(db.Integer, db.ForeignKey('appointments.id'), nullable=False)
    doctor_id = db.Column(db.String(255), db.ForeignKey('doctors.id'), nullable=False)

    treatment_plan = db.Column(db.Text)
    prescriptions = db.Column(db.Text)
    lab_request = db.Column(db.Text)
    # Mirrors the current clinical notes version
    notes = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    patient = db.relationship('Patient', back_populates='medical_records')
    appointment = db.relationship('Appointment', back_populates='medical_records')
    doctor = db.relationship('Doctor')
    diagnosis = db.relationship('Diagnosis', back_populates='medical_record', cascade="all, delete-orphan")
    vital_signs = db.relationship('VitalSigns', back_populates='medical_record', cascade="all, delete-orphan")
    notes_versions = db.relationship(
        'ClinicalNotesVersion',
        back_populates='medical_record',
        lazy='dynamic',
        cascade="all, delete-orphan"
    )

    def to_dict(self, include_details=True):
        result = {
            'id': self.id,
            'patient_id': self.patient_id,
            'appointment_id': self.appointment_id,
            'doctor_id': self.doctor_id,
            'treatment_plan': self.treatment_plan,
            'prescriptions': self.prescriptions,
            'lab_request': self.lab_request,
            'notes': self.notes,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_details:
            result['patient'] = self.patient.to_dict(include_private=False) if self.patient else None
            result['doctor'] = self.doctor.to_dict() if self.doctor else None
            result['appointment'] = self.appointment.to_dict(include_people=False) if self.appointment else None
            result['diagnosis'] = [d.to_dict() for d in self.diagnosis]
            result['vital_signs'] = [v.to_dict() for v in self.vital_signs]
        return result


class Diagnosis(db.Model):
    __tablename__ = 'diagnoses'

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.String(255), db.ForeignKey('patients.id'), nullable=False)
    medical_id = db.Column(db.Integer, db.ForeignKey('medical_records.id'), nullable=False)
    doctor_id = db.Column(db.String(255), db.ForeignKey('doctors.id'), nullable=False)

    symptoms = db.Column(db.Text, nullable=False)
    diagnosis = db.Column(db.Text, nullable=False)
    notes = db.Column(db.Text)
    prescribed_medications = db.Column(db.Text)
    follow_up_plan = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    medical_record = db.relationship('MedicalRecord', back_populates='diagnosis')

    def to_dict(self):
        return {
            'id': self.id,
            'symptoms': self.symptoms,
            'diagnosis': self.diagnosis,
            'notes': self.notes,
            'prescribed_medications': self.prescribed_medications,
            'follow_up_plan': self.follow_up_plan,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class VitalSigns(db.Model):
    __tablename__ = 'vital_signs'

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.String(255), db.ForeignKey('patients.id'), nullable=False)
    medical_id = db.Column(db.Integer, db.ForeignKey('medical_records.id'), nullable=False)

    body_temperature = db.Column(db.Float, nullable=False)  # Celsius
    systolic = db.Column(db.Integer, nullable=False)
    diastolic = db.Column(db.Integer, nullable=False)
    heart_rate = db.Column(db.String(20), nullable=False)
    respiratory_rate = db.Column(db.Integer)
    oxygen_saturation = db.Column(db.Integer)
    weight = db.Column(db.Float, nullable=False)  # kg
    height = db.Column(db.Float, nullable=False)  # cm

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    medical_record = db.relationship('MedicalRecord', back_populates='vital_signs')

    def to_dict(self):
        return {
            'id': self.id,
            'body_temperature': self.body_temperature,
            'systolic': self.systolic,
            'diastolic': self.diastolic,
            'heart_rate': self.heart_rate,
            'respiratory_rate': self.respiratory_rate,
            'oxygen_saturation': self.oxygen_saturation,
            'weight': self.weight,
            'height': self.height,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
