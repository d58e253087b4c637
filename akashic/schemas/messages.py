from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from akashic.models.messages import ChatChannel


class OracleMessageRequest(BaseModel):
    session_key: str = Field(..., min_length=1, max_length=100, description="Client chat session id")
    message: str = Field(..., min_length=1, max_length=2000)


class KeeperMessageRequest(BaseModel):
    session_key: str = Field(..., min_length=1, max_length=100, description="Client chat session id")
    content: str = Field(..., min_length=1, max_length=2000)


class ChatMessageResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    channel: ChatChannel
    session_key: str
    content: str
    is_user: bool
    created_at: datetime


class ChatExchangeResponse(BaseModel):
    user_message: ChatMessageResponse
    reply: ChatMessageResponse


class ContactRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)


class ContactResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    name: str
    email: str
    subject: str
    message: str
    created_at: datetime
