# /aloa/schemas/alert_schemas.py
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator, model_validator

from aloa.models.alert_models import ALERT_TYPES, ALERT_PRIORITIES, RELATED_MODELS
from aloa.schemas import one_of, to_naive_utc


class AlertCreateSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    user: PositiveInt
    type: str
    title: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1, max_length=1000)
    priority: str = 'medium'
    scheduled_for: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    related_model: Optional[str] = None
    related_id: Optional[PositiveInt] = None
    action_url: Optional[str] = Field(default=None, max_length=500)
    metadata: Optional[Dict[str, Any]] = None

    @field_validator('type')
    @classmethod
    def check_type(cls, value):
        return one_of(value, ALERT_TYPES, 'Invalid alert type')

    @field_validator('priority')
    @classmethod
    def check_priority(cls, value):
        return one_of(value, ALERT_PRIORITIES, 'Invalid priority')

    @field_validator('related_model')
    @classmethod
    def check_related_model(cls, value):
        return one_of(value, RELATED_MODELS, 'Invalid related model')

    @field_validator('scheduled_for', 'expires_at')
    @classmethod
    def check_datetimes(cls, value):
        return to_naive_utc(value)

    @model_validator(mode='after')
    def related_reference_is_complete(self):
        if (self.related_model is None) != (self.related_id is None):
            raise ValueError('related_model and related_id must be given together')
        return self
