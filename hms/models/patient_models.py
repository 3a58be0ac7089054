from datetime import datetime
from hms.extensions import db
from hms.utils.encryption_util import encryptor


class Patient(db.Model):
    """Model for storing patient information. The id is the identity provider's user id."""
    __tablename__ = 'patients'

    id = db.Column(db.String(255), primary_key=True)

    first_name = db.Column(db.String(255), nullable=False)
    last_name = db.Column(db.String(255), nullable=False)
    date_of_birth = db.Column(db.Date, nullable=False)
    gender = db.Column(db.String(10), nullable=False, default='MALE')
    phone = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    marital_status = db.Column(db.String(20), nullable=False)
    address = db.Column(db.String(500), nullable=False)

    # --- Emergency Contact ---
    emergency_contact_name = db.Column(db.String(255), nullable=False)
    emergency_contact_number = db.Column(db.String(50), nullable=False)
    relation = db.Column(db.String(20), nullable=False)

    # --- Medical background ---
    blood_group = db.Column(db.String(10))
    allergies = db.Column(db.Text)
    medical_conditions = db.Column(db.Text)
    medical_history = db.Column(db.Text)

    # --- Insurance (policy number is encrypted) ---
    insurance_provider = db.Column(db.String(255))
    insurance_number = db.Column(db.String(512))

    # --- Consents ---
    privacy_consent = db.Column(db.Boolean, nullable=False, default=False)
    service_consent = db.Column(db.Boolean, nullable=False, default=False)
    medical_consent = db.Column(db.Boolean, nullable=False, default=False)

    img = db.Column(db.String(1024))
    img_public_id = db.Column(db.String(255))
    color_code = db.Column(db.String(20))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # --- Relationships ---
    appointments = db.relationship('Appointment', back_populates='patient', lazy='dynamic', cascade="all, delete-orphan")
    medical_records = db.relationship('MedicalRecord', back_populates='patient', lazy='dynamic', cascade="all, delete-orphan")
    payments = db.relationship('Payment', back_populates='patient', lazy='dynamic', cascade="all, delete-orphan")
    ratings = db.relationship('Rating', back_populates='patient', lazy='dynamic', cascade="all, delete-orphan")

    @property
    def name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def set_insurance_number(self, value):
        self.insurance_number = encryptor.encrypt(value) if value else None

    def get_insurance_number(self):
        return encryptor.decrypt(self.insurance_number) if self.insurance_number else None

    def to_dict(self, include_private=True):
        """Serializes the patient for API responses."""
        result = {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'name': self.name,
            'gender': self.gender,
            'img': self.img,
            'color_code': self.color_code,
        }
        if include_private:
            result.update({
                'date_of_birth': self.date_of_birth.isoformat() if self.date_of_birth else None,
                'phone': self.phone,
                'email': self.email,
                'marital_status': self.marital_status,
                'address': self.address,
                'emergency_contact_name': self.emergency_contact_name,
                'emergency_contact_number': self.emergency_contact_number,
                'relation': self.relation,
                'blood_group': self.blood_group,
                'allergies': self.allergies,
                'medical_conditions': self.medical_conditions,
                'medical_history': self.medical_history,
                'insurance_provider': self.insurance_provider,
                'insurance_number': self.get_insurance_number(),
                'privacy_consent': self.privacy_consent,
                'service_consent': self.service_consent,
                'medical_consent': self.medical_consent,
                'created_at': self.created_at.isoformat() if self.created_at else None,
                'updated_at': self.updated_at.isoformat() if self.updated_at else None,
            })
        return result
