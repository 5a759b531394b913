"""Auth request/response schemas. JSON keys are camelCase."""
from pydantic import BaseModel, ConfigDict, EmailStr, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.services.validation import (
    normalize_email,
    validate_email,
    validate_full_name,
    validate_password,
    validate_username,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SignupRequest(CamelModel):
    email: EmailStr
    password: str
    full_name: str
    username: str

    @field_validator("email")
    @classmethod
    def email_provider_allowed(cls, v: str) -> str:
        v = normalize_email(v)
        error = validate_email(v)
        if error:
            raise ValueError(error)
        return v

    @field_validator("full_name")
    @classmethod
    def full_name_valid(cls, v: str) -> str:
        error = validate_full_name(v)
        if error:
            raise ValueError(error)
        return v.strip()

    @field_validator("username")
    @classmethod
    def username_valid(cls, v: str) -> str:
        error = validate_username(v)
        if error:
            raise ValueError(error)
        return v.strip().lower()

    @model_validator(mode="after")
    def password_policy(self):
        result = validate_password(self.password, self.email)
        if not result.is_valid:
            raise ValueError(result.messages[0])
        return self


class VerifyEmailRequest(CamelModel):
    """Verify email with the code sent after signup/login/resend."""
    email: str = ""
    code: str = ""


class LoginRequest(CamelModel):
    email: str = ""
    password: str = ""


class ResendVerificationRequest(CamelModel):
    email: str = ""


class UserResponse(CamelModel):
    id: str
    email: str
    full_name: str
    username: str


class UserEnvelope(CamelModel):
    user: UserResponse


class MessageResponse(CamelModel):
    message: str


class VerificationRequiredResponse(CamelModel):
    """403 body from login when the account exists but is not verified yet."""
    message: str = "Email not verified. We have sent you a new verification code."
    requires_verification: bool = True
    email: str
