from __future__ import annotations

from pydantic import BaseModel


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class SupervisorResponse(BaseModel):
    id: str
    username: str
    name: str
    email: str
    role: str
