from datetime import datetime
from hms.extensions import db

# Staff roles carried in the identity provider's user metadata
STAFF_IDENTITY_ROLES = ('nurse', 'lab_technician', 'cashier')


class Doctor(db.Model):
    """Model for storing doctor information. The id is the identity provider's user id."""
    __tablename__ = 'doctors'

    id = db.Column(db.String(255), primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    name = db.Column(db.String(255), nullable=False)
    specialization = db.Column(db.String(100), nullable=False)
    license_number = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(50), nullable=False)
    address = db.Column(db.String(500), nullable=False)
    department = db.Column(db.String(100))
    img = db.Column(db.String(1024))
    img_public_id = db.Column(db.String(255))
    color_code = db.Column(db.String(20))
    availability_status = db.Column(db.String(20), default='AVAILABLE')
    type = db.Column(db.String(10), nullable=False, default='FULL')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # --- Relationships ---
    working_days = db.relationship('WorkingDay', back_populates='doctor', cascade="all, delete-orphan")
    appointments = db.relationship('Appointment', back_populates='doctor', lazy='dynamic', cascade="all, delete-orphan")
    ratings = db.relationship('Rating', back_populates='doctor', lazy='dynamic', cascade="all, delete-orphan")

    def to_dict(self, include_schedule=False):
        result = {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'specialization': self.specialization,
            'license_number': self.license_number,
            'phone': self.phone,
            'address': self.address,
            'department': self.department,
            'img': self.img,
            'color_code': self.color_code,
            'availability_status': self.availability_status,
            'type': self.type,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if include_schedule:
            result['working_days'] = [day.to_dict() for day in self.working_days]
        return result


class WorkingDay(db.Model):
    """A weekday a doctor works, with opening and closing times."""
    __tablename__ = 'working_days'

    id = db.Column(db.Integer, primary_key=True)
    doctor_id = db.Column(db.String(255), db.ForeignKey('doctors.id'), nullable=False)
    day = db.Column(db.String(10), nullable=False)
    start_time = db.Column(db.String(10), nullable=False)
    close_time = db.Column(db.String(10), nullable=False)

    doctor = db.relationship('Doctor', back_populates='working_days')

    def to_dict(self):
        return {
            'id': self.id,
            'day': self.day,
            'start_time': self.start_time,
            'close_time': self.close_time,
        }


class Staff(db.Model):
    """Model for nurses, lab technicians, cashiers and office admins."""
    __tablename__ = 'staff'

    id = db.Column(db.String(255), primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50), nullable=False)
    address = db.Column(db.String(500), nullable=False)
    department = db.Column(db.String(100))
    img = db.Column(db.String(1024))
    img_public_id = db.Column(db.String(255))
    license_number = db.Column(db.String(100))
    color_code = db.Column(db.String(20))
    role = db.Column(db.String(20), nullable=False, default='NURSE')
    status = db.Column(db.String(10), nullable=False, default='ACTIVE')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'phone': self.phone,
            'address': self.address,
            'department': self.department,
            'img': self.img,
            'license_number': self.license_number,
            'color_code': self.color_code,
            'role': self.role,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class Rating(db.Model):
    """A patient's review of a doctor."""
    __tablename__ = 'ratings'

    id = db.Column(db.Integer, primary_key=True)
    staff_id = db.Column(db.String(255), db.ForeignKey('doctors.id'), nullable=False)
    patient_id = db.Column(db.String(255), db.ForeignKey('patients.id'), nullable=False)
    rating = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    doctor = db.relationship('Doctor', back_populates='ratings')
    patient = db.relationship('Patient', back_populates='ratings')

    def to_dict(self):
        return {
            'id': self.id,
            'staff_id': self.staff_id,
            'patient_id': self.patient_id,
            'patient_name': self.patient.name if self.patient else None,
            'rating': self.rating,
            'comment': self.comment,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
