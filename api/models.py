"""
API request and response models for the Favorite Countries REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in auth/models.py and
favorites/models.py, which own the internal domain representation. Route
handlers map between the two.

JSON field names are camelCase (countryCode, accessToken, ...) because the
browser client speaks camelCase; Python attribute names stay snake_case via
the to_camel alias generator. FastAPI serializes response models by alias.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from auth.models import User
from favorites.models import Favorite

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


class _FrozenCamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# ---------------------------------------------------------------------------
# Shared envelopes
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Error envelope returned on every 4xx/5xx response."""

    model_config = ConfigDict(frozen=True)

    message: str
    code: str
    detail: Optional[str] = None


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class HealthResponse(MessageResponse):
    """Response for GET /api/health."""

    message: str = "API is running."


# ---------------------------------------------------------------------------
# Auth -- requests
# ---------------------------------------------------------------------------


class SignupRequest(_CamelModel):
    """Request body for POST /api/auth/signup.

    roles is optional; omitted or empty means ["user"]. Names are validated
    against the seeded roles by the auth service, not here, so an unknown
    name produces InvalidRole rather than a generic validation error.
    """

    username: str = Field(min_length=3, max_length=50)
    email: str = Field(min_length=3, max_length=255, pattern=_EMAIL_PATTERN)
    password: str = Field(min_length=6, max_length=72)
    roles: Optional[list[str]] = Field(default=None, max_length=3)

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        # bcrypt only accepts 72 bytes; multi-byte characters count more than once.
        if len(value.encode("utf-8")) > 72:
            raise ValueError("password must be at most 72 bytes when UTF-8 encoded")
        return value


class SigninRequest(_CamelModel):
    """Request body for POST /api/auth/signin."""

    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=72)


class UserPatch(_CamelModel):
    """Request body for PATCH /api/users/{id}. Admin only."""

    roles: Optional[list[str]] = Field(default=None, min_length=1, max_length=3)
    is_active: Optional[bool] = None


# ---------------------------------------------------------------------------
# Auth -- responses
# ---------------------------------------------------------------------------


class UserResponse(_FrozenCamelModel):
    id: int
    username: str
    email: str
    roles: list[str]

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(id=user.id, username=user.username, email=user.email, roles=[r.value for r in user.roles])


class SigninResponse(UserResponse):
    access_token: str

    @classmethod
    def from_sign_in(cls, user: User, token: str) -> "SigninResponse":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            roles=[r.value for r in user.roles],
            access_token=token,
        )


class UserAdminResponse(UserResponse):
    """One row in the admin user listing."""

    is_active: bool
    created_at: str
    last_login: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserAdminResponse":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            roles=[r.value for r in user.roles],
            is_active=user.is_active,
            created_at=user.created_at or "",
            last_login=user.last_login,
        )


# ---------------------------------------------------------------------------
# Favorites
# ---------------------------------------------------------------------------


class ToggleFavoriteRequest(_CamelModel):
    """Request body for POST /api/favorites/toggle.

    All three fields are required and must be non-empty; a missing or blank
    field is a 400.
    """

    country_code: str = Field(min_length=1, max_length=8)
    country_name: str = Field(min_length=1, max_length=255)
    flag_url: str = Field(min_length=1, max_length=2048)

    @field_validator("country_code")
    @classmethod
    def upper_code(cls, value: str) -> str:
        return value.upper()


class FavoriteResponse(_FrozenCamelModel):
    country_code: str
    country_name: str
    flag_url: str

    @classmethod
    def from_favorite(cls, favorite: Favorite) -> "FavoriteResponse":
        return cls(
            country_code=favorite.country_code,
            country_name=favorite.country_name,
            flag_url=favorite.flag_url,
        )


class ToggleFavoriteResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    added: bool
