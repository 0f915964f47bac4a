from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class RegisterRequest(BaseModel):
    """
    Registration payload.

    Whitespace-only usernames are rejected by the user service.
    """
    username: str = Field(..., min_length=1, max_length=255)
    password: str


class LoginRequest(BaseModel):
    username: str
    password: str


class UserResponse(BaseModel):
    """
    Safe user representation for API responses.

    Never include password_hash in any response.
    """
    id: int
    username: str

    model_config = ConfigDict(from_attributes=True)


class SessionUser(BaseModel):
    """
    Identity carried by a valid session cookie.
    """
    user_id: int
    username: str


class MessageText(BaseModel):
    # Empty text is accepted
    text: str


class MessageResponse(BaseModel):
    id: int
    text: str
    timestamp: datetime
    user_id: int
    username: str


class MessageUpdateResponse(BaseModel):
    id: int
    text: str
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class StatusResponse(BaseModel):
    """
    Generic message response for operations without specific return data.
    """
    message: str
