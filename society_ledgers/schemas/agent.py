from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field


class AgentCreate(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=8)
    assigned_societies: List[str] = []


class AgentSocietiesUpdate(BaseModel):
    assigned_societies: List[str]


class AgentTerminate(BaseModel):
    reason: Optional[str] = None
