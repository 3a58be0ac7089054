# Import every model module so relationships resolve and create_all sees all tables.
from hms.models import (  # noqa: F401
    patient_models,
    user_models,
    appointment_models,
    medical_models,
    clinical_notes_models,
    billing_models,
    system_models,
)
