# /aloa/schemas/health_record_schemas.py
import datetime as dt
import json
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from aloa.models.health_record_models import RECORD_TYPES, LAB_VALUE_STATUSES
from aloa.schemas import one_of, split_tags


def _parse_lab_values(value):
    # Multipart forms carry lab values as a JSON string
    if isinstance(value, str):
        if not value.strip():
            return []
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            raise ValueError('Lab values must be a JSON list')
    return value


class LabValueSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    parameter: str = Field(min_length=1, max_length=100)
    value: str = Field(max_length=100)
    unit: Optional[str] = Field(default=None, max_length=50)
    reference_range: Optional[str] = Field(default=None, max_length=100)
    status: Optional[str] = None

    @field_validator('value', mode='before')
    @classmethod
    def stringify_value(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator('status')
    @classmethod
    def check_status(cls, value):
        return one_of(value, LAB_VALUE_STATUSES, 'Invalid lab value status')


class HealthRecordCreateSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    patient: Optional[PositiveInt] = None
    type: str
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=2000)
    date: dt.date
    tags: List[str] = Field(default_factory=list)
    is_private: bool = False
    lab_values: List[LabValueSchema] = Field(default_factory=list)

    @field_validator('type')
    @classmethod
    def check_type(cls, value):
        return one_of(value, RECORD_TYPES, 'Invalid record type')

    @field_validator('tags', mode='before')
    @classmethod
    def check_tags(cls, value):
        return split_tags(value) if value is not None else []

    @field_validator('lab_values', mode='before')
    @classmethod
    def check_lab_values(cls, value):
        return _parse_lab_values(value) if value is not None else []


class HealthRecordUpdateSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    tags: Optional[List[str]] = None
    is_private: Optional[bool] = None
    lab_values: Optional[List[LabValueSchema]] = None

    @field_validator('tags', mode='before')
    @classmethod
    def check_tags(cls, value):
        return split_tags(value)

    @field_validator('lab_values', mode='before')
    @classmethod
    def check_lab_values(cls, value):
        return _parse_lab_values(value)
