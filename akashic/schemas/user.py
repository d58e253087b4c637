"""
Pydantic schemas defining the contract for user identity and authentication
across the Presentation (API) and Service Layers.
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

# --- Input Schemas (Requests / Commands) ---


class RegisterRequest(BaseModel):
    """
    Schema for user registration. The welcome bonus and starter inventory are
    granted by the Service Layer, never taken from the request.
    """

    username: str = Field(..., min_length=3, max_length=50, description="Unique login handle")
    email: EmailStr = Field(..., description="User's unique email address")
    password: str = Field(..., min_length=8, description="User's password (min 8 characters, will be hashed)")
    phone: str | None = Field(default=None, max_length=32, description="Optional phone number")


class LoginRequest(BaseModel):
    """
    Minimal schema for user authentication/login command.
    """

    username: str = Field(..., min_length=1, description="Username or email address")
    password: str = Field(..., min_length=1, description="User's plain text password")


class ProfileRequest(BaseModel):
    """
    Schema for updating user profile fields. Fields are optional as they are updates.
    """

    email: EmailStr | None = Field(default=None, description="User's email address")
    phone: str | None = Field(default=None, max_length=32)
    profile_picture: str | None = Field(default=None, max_length=255, description="Path or URL of the picture")


class PasswordChangeRequest(BaseModel):
    """
    Schema for changing password (requires old password verification).
    """

    old_password: str = Field(..., description="Current password for verification")
    new_password: str = Field(..., min_length=8, description="New password (minimum 8 characters)")


# --- Output Schemas (Response / Domain Object) ---


class UserResponse(BaseModel):
    """
    Response schema for user information. Also the authoritative snapshot clients
    revalidate their cached user against.
    """

    # Configuration allows mapping from SQLAlchemy ORM objects
    model_config = {"from_attributes": True}

    id: int = Field(..., description="User ID")
    username: str = Field(..., description="User's login handle")
    email: str = Field(..., description="User's email address")
    phone: str | None = Field(default=None)
    profile_picture: str | None = Field(default=None)
    mana_balance: int = Field(..., description="Current Mana balance")
    is_active: bool | None = Field(default=None, description="Whether the user account is active")
    created_at: datetime = Field(..., description="Date and time of user creation")


class AuthResponse(BaseModel):
    user: UserResponse
    token: str = Field(..., description="Session token; also set as a cookie")
    welcome_bonus: int | None = Field(default=None, description="Mana granted at registration")


class MessageResponse(BaseModel):
    message: str
