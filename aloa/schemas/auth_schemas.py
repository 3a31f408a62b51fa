# /aloa/schemas/auth_schemas.py
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from aloa.schemas import one_of

SELF_REGISTER_ROLES = ('patient', 'doctor')


class RegisterSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=1)
    role: str = 'patient'
    specialization: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=30)

    @field_validator('role')
    @classmethod
    def check_role(cls, value):
        return one_of(value, SELF_REGISTER_ROLES, 'Role must be patient or doctor')

    @model_validator(mode='after')
    def doctors_need_specialization(self):
        if self.role == 'doctor' and not self.specialization:
            raise ValueError('Specialization is required for doctors')
        return self


class LoginSchema(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserStatusSchema(BaseModel):
    is_active: bool
