from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from todo_backend.utils.sanitization import sanitize_string, normalize_email


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


def _otp_to_str(v):
    # Clients send back the number they received
    return str(v) if isinstance(v, int) and not isinstance(v, bool) else v


class EmailRequest(CamelModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def normalize(cls, v):
        return normalize_email(v)


class UserCreate(EmailRequest):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)
    otp: str | None = None  # checked against the code from send-otp when given

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)

    @field_validator("otp", mode="before")
    @classmethod
    def coerce_otp(cls, v):
        return _otp_to_str(v)


class LoginRequest(EmailRequest):
    password: str


class PasswordReset(EmailRequest):
    new_password: str = Field(..., min_length=1)
    otp: str = Field(..., min_length=1)

    @field_validator("otp", mode="before")
    @classmethod
    def coerce_otp(cls, v):
        return _otp_to_str(v)


class PhotoUpdate(CamelModel):
    user_id: str = Field(..., min_length=1)
    photo: str | None = None

    @field_validator("photo", mode="before")
    @classmethod
    def falsy_clears(cls, v):
        # null, "", false and 0 all remove the photo
        return v or None


class UserResponse(CamelModel):
    id: str
    first_name: str
    last_name: str
    email: str
    profile_photo: str = ""


class MessageResponse(BaseModel):
    message: str


class OtpResponse(BaseModel):
    otp: int | None = None
    message: str | None = None


class LoginResponse(BaseModel):
    message: str
    user: UserResponse


class PhotoResponse(CamelModel):
    message: str
    profile_photo: str
