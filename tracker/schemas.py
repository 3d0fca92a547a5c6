"""
Pydantic schemas for the tracker API.

Collection records are free-form JSON objects and are not modelled here.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class UserProfile(BaseModel):
    id: Optional[Union[str, int]] = None
    username: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None


class LoginResponse(BaseModel):
    token: str
    user: UserProfile


class HealthResponse(BaseModel):
    status: Literal["ok"]
    timestamp: datetime


class MessageResponse(BaseModel):
    message: str
