from typing import Optional
from pydantic import BaseModel


class ContactIn(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    message: Optional[str] = None


class MessageStatusIn(BaseModel):
    status: Optional[str] = None


class MessageResponseIn(BaseModel):
    response: Optional[str] = None
