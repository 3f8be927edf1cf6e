from typing import Optional
from pydantic import BaseModel


class SitePasswordIn(BaseModel):
    password: Optional[str] = None


class AdminLoginIn(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
