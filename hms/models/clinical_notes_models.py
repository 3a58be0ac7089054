# /hms/models/clinical_notes_models.py
from datetime import datetime
from hms.extensions import db


class ClinicalNotesVersion(db.Model):
    """Append-only snapshot of a medical record's notes field.

    Exactly one row per medical record carries ``is_current``; the partial
    unique index below rejects a second current row and the
    (medical_record_id, version_number) constraint rejects a duplicate
    version number from two concurrent writers.
    """
    __tablename__ = 'clinical_notes_versions'
    __table_args__ = (
        db.UniqueConstraint('medical_record_id', 'version_number', name='uq_clinical_notes_version_number'),
        db.Index(
            'uq_clinical_notes_current',
            'medical_record_id',
            unique=True,
            sqlite_where=db.text('is_current = 1'),
            postgresql_where=db.text('is_current'),
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    medical_record_id = db.Column(db.Integer, db.ForeignKey('medical_records.id'), nullable=False, index=True)
    doctor_id = db.Column(db.String(255), db.ForeignKey('doctors.id'), nullable=False)

    notes = db.Column(db.Text, nullable=False)
    version_number = db.Column(db.Integer, nullable=False)
    change_reason = db.Column(db.String(500))
    is_current = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    medical_record = db.relationship('MedicalRecord', back_populates='notes_versions')
    doctor = db.relationship('Doctor')

    def to_dict(self):
        """Serialize a version for API responses."""
        return {
            'id': self.id,
            'medical_record_id': self.medical_record_id,
            'notes': self.notes,
            'version_number': self.version_number,
            'change_reason': self.change_reason,
            'is_current': self.is_current,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'doctor_name': self.doctor.name if self.doctor else None,
            'doctor_specialization': self.doctor.specialization if self.doctor else None,
        }
