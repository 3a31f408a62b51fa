# /aloa/schemas/prescription_schemas.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from aloa.models.prescription_models import MEDICATION_FREQUENCIES, PRESCRIPTION_STATUSES, MAX_REFILLS
from aloa.schemas import one_of, to_naive_utc


class MedicationSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=200)
    dosage: str = Field(min_length=1, max_length=100)
    frequency: str
    duration: str = Field(min_length=1, max_length=100)
    instructions: Optional[str] = Field(default=None, max_length=500)

    @field_validator('frequency')
    @classmethod
    def check_frequency(cls, value):
        return one_of(value, MEDICATION_FREQUENCIES, 'Invalid frequency')


class PrescriptionCreateSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    patient: PositiveInt
    doctor: Optional[PositiveInt] = None
    appointment: Optional[PositiveInt] = None
    medications: List[MedicationSchema]
    diagnosis: Optional[str] = Field(default=None, max_length=1000)
    notes: Optional[str] = Field(default=None, max_length=1000)
    refills_allowed: int = Field(default=0, ge=0, le=MAX_REFILLS)
    is_urgent: bool = False
    expiry_date: Optional[datetime] = None

    @field_validator('medications')
    @classmethod
    def check_medications(cls, value):
        if not value:
            raise ValueError('At least one medication is required')
        return value

    @field_validator('expiry_date')
    @classmethod
    def check_expiry(cls, value):
        return to_naive_utc(value)


class PrescriptionUpdateSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    status: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=1000)
    refills_allowed: Optional[int] = Field(default=None, ge=0, le=MAX_REFILLS)

    @field_validator('status')
    @classmethod
    def check_status(cls, value):
        return one_of(value, PRESCRIPTION_STATUSES, 'Invalid status')
