# /hms/schemas.py
"""Request payload schemas for forms and API bodies."""
import re
from datetime import date
from decimal import Decimal
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator

from hms.services.identity import PASSWORD_SPECIAL_CHARACTERS

# 11-digit local phone numbers
Phone = Annotated[str, StringConstraints(strip_whitespace=True, min_length=11, max_length=11)]
Address = Annotated[str, StringConstraints(min_length=5, max_length=500)]
PersonName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=50)]
NonEmpty = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

Gender = Literal['MALE', 'FEMALE']
MaritalStatus = Literal['married', 'single', 'divorced', 'widowed', 'separated']
Relation = Literal['mother', 'father', 'husband', 'wife', 'other']
Weekday = Literal['monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday']
AppointmentStatus = Literal['PENDING', 'SCHEDULED', 'COMPLETED', 'CANCELLED']
PaymentStatus = Literal['PAID', 'UNPAID', 'PART']
PaymentMethod = Literal['CASH', 'CARD']

_PASSWORD_PATTERN = re.compile(r'^(?=.*[a-zA-Z])(?=.*\d)(?=.*[' + re.escape(PASSWORD_SPECIAL_CHARACTERS) + r'])')


class _Form(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=False)


# --- Patients --------------------------------------------------------------

class PatientForm(_Form):
    first_name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=30)]
    last_name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=30)]
    date_of_birth: date
    gender: Gender
    phone: Phone
    email: EmailStr
    address: Address
    marital_status: MaritalStatus
    emergency_contact_name: PersonName
    emergency_contact_number: Phone
    relation: Relation
    blood_group: Optional[str] = None
    allergies: Optional[str] = None
    medical_conditions: Optional[str] = None
    medical_history: Optional[str] = None
    insurance_provider: Optional[str] = None
    insurance_number: Optional[str] = None
    img: Optional[str] = None

    privacy_consent: Optional[bool] = None
    service_consent: Optional[bool] = None
    medical_consent: Optional[bool] = None


class PatientCreateForm(PatientForm):
    """New registrations must accept every consent."""
    privacy_consent: bool = False
    service_consent: bool = False
    medical_consent: bool = False

    @field_validator('privacy_consent')
    @classmethod
    def _privacy(cls, value):
        if value is not True:
            raise ValueError('You must agree to the privacy policy.')
        return value

    @field_validator('service_consent')
    @classmethod
    def _service(cls, value):
        if value is not True:
            raise ValueError('You must agree to the terms of service.')
        return value

    @field_validator('medical_consent')
    @classmethod
    def _medical(cls, value):
        if value is not True:
            raise ValueError('You must agree to the medical treatment terms.')
        return value


# --- Doctors & staff -------------------------------------------------------

class WorkingDayForm(_Form):
    day: Weekday
    start_time: NonEmpty
    close_time: NonEmpty


class DoctorForm(_Form):
    name: PersonName
    phone: Phone
    email: EmailStr
    address: Address
    specialization: Annotated[str, StringConstraints(min_length=2)]
    license_number: Annotated[str, StringConstraints(min_length=2)]
    type: Literal['FULL', 'PART']
    department: Annotated[str, StringConstraints(min_length=2)]
    img: Optional[str] = None
    password: Annotated[str, StringConstraints(min_length=8)]
    work_schedule: Optional[List[WorkingDayForm]] = None

    @field_validator('password')
    @classmethod
    def _password_strength(cls, value):
        if not _PASSWORD_PATTERN.match(value):
            raise ValueError('Password must contain at least one letter, one number, and one special character')
        return value


class StaffForm(_Form):
    name: PersonName
    role: Literal['NURSE', 'LAB_TECHNICIAN']
    phone: Phone
    email: EmailStr
    address: Address
    license_number: Optional[str] = None
    department: Optional[str] = None
    img: Optional[str] = None
    password: Optional[str] = None

    @field_validator('password')
    @classmethod
    def _password_length(cls, value):
        if value and len(value) < 8:
            raise ValueError('Password must be at least 8 characters long!')
        return value


class ReviewForm(_Form):
    patient_id: NonEmpty
    staff_id: NonEmpty
    rating: int = Field(ge=1, le=5)
    comment: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)]


# --- Appointments ----------------------------------------------------------

class AppointmentForm(_Form):
    doctor_id: NonEmpty
    type: NonEmpty
    appointment_date: date
    time: NonEmpty
    note: Optional[str] = None
    # Only honoured for admins and staff booking on a patient's behalf
    patient_id: Optional[str] = None


class AppointmentStatusForm(_Form):
    status: AppointmentStatus
    reason: Optional[str] = None


# --- Medical records & clinical notes --------------------------------------

class MedicalRecordForm(_Form):
    appointment_id: int = Field(alias='appointmentId')
    patient_id: NonEmpty = Field(alias='patientId')
    doctor_id: NonEmpty = Field(alias='doctorId')
    treatment_plan: Optional[str] = None
    prescriptions: Optional[str] = None
    lab_request: Optional[str] = None
    notes: Optional[str] = None

    symptoms: NonEmpty
    diagnosis: NonEmpty
    prescribed_medications: Optional[str] = None
    follow_up_plan: Optional[str] = None

    body_temperature: float
    systolic: int
    diastolic: int
    heart_rate: NonEmpty = Field(alias='heartRate')
    respiratory_rate: Optional[int] = None
    oxygen_saturation: Optional[int] = None
    weight: float
    height: float


class ClinicalNotesForm(_Form):
    notes: Annotated[str, StringConstraints(min_length=1)]
    change_reason: Optional[str] = None

    @field_validator('notes')
    @classmethod
    def _notes_present(cls, value):
        if not value.strip():
            raise ValueError('Notes are required')
        return value

    @field_validator('change_reason')
    @classmethod
    def _blank_reason_is_none(cls, value):
        if value is not None and not value.strip():
            return None
        return value.strip() if value else value


# --- Billing ---------------------------------------------------------------

class BillItemForm(_Form):
    service_id: int = Field(alias='serviceId')
    quantity: int = Field(default=1, ge=1)
    medication_name: Optional[str] = Field(default=None, alias='medicationName')
    dosage: Optional[str] = None
    instructions: Optional[str] = None


class BillingForm(_Form):
    appointment_id: int = Field(alias='appointmentId')
    patient_id: NonEmpty = Field(alias='patientId')
    services: List[BillItemForm] = Field(min_length=1)
    discount: Decimal = Field(default=Decimal('0'), ge=0)
    tax_rate: Decimal = Field(default=Decimal('0'), ge=0, le=100, alias='taxRate')
    notes: str = ''


class PaymentUpdateForm(_Form):
    status: PaymentStatus
    amount_paid: Decimal = Field(ge=0, alias='amountPaid')
    payment_method: Optional[PaymentMethod] = Field(default=None, alias='paymentMethod')
    receipt_number: Optional[str] = Field(default=None, alias='receiptNumber')
