# fanvault/schemas/auth.py
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from fanvault.utils.validators import validate_username, validate_password, validate_display_name


class UserRegister(BaseModel):
    email: EmailStr = Field(..., max_length=320)
    password: str
    confirm_password: str
    username: str
    display_name: str
    age_verified: bool = False
    terms_accepted: bool = False

    @field_validator('username')
    def check_username(cls, v):
        return validate_username(v)

    @field_validator('password')
    def check_password(cls, v):
        return validate_password(v)

    @field_validator('display_name')
    def check_display_name(cls, v):
        return validate_display_name(v)

    @field_validator('age_verified')
    def check_age(cls, v):
        if not v:
            raise ValueError('You must be 18 or older to register')
        return v

    @field_validator('terms_accepted')
    def check_terms(cls, v):
        if not v:
            raise ValueError('You must accept the terms and conditions')
        return v

    @model_validator(mode='after')
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    username: str
    is_creator: bool
