# /aloa/schemas/appointment_schemas.py
import datetime as dt
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from aloa.models.appointment_models import APPOINTMENT_TYPES, APPOINTMENT_STATUSES
from aloa.schemas import normalize_time, one_of


class AppointmentCreateSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    doctor: Optional[PositiveInt] = None
    patient: Optional[PositiveInt] = None
    date: dt.date
    time: str
    type: str
    notes: Optional[str] = Field(default=None, max_length=500)
    symptoms: Optional[str] = Field(default=None, max_length=1000)

    @field_validator('time', mode='before')
    @classmethod
    def check_time(cls, value):
        return normalize_time(value)

    @field_validator('type')
    @classmethod
    def check_type(cls, value):
        return one_of(value, APPOINTMENT_TYPES, 'Valid appointment type is required')


class AppointmentUpdateSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    status: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=500)
    symptoms: Optional[str] = Field(default=None, max_length=1000)
    diagnosis: Optional[str] = Field(default=None, max_length=1000)
    treatment: Optional[str] = Field(default=None, max_length=1000)
    date: Optional[dt.date] = None
    time: Optional[str] = None
    doctor: Optional[PositiveInt] = None

    @field_validator('status')
    @classmethod
    def check_status(cls, value):
        return one_of(value, APPOINTMENT_STATUSES, 'Invalid status')

    @field_validator('time', mode='before')
    @classmethod
    def check_time(cls, value):
        return normalize_time(value)
