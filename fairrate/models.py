"""Pydantic request models shared across routers.

Models are lenient: semantic validation (missing fields,
non-numeric rates) happens in the services so the error messages match the
public API.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


class CalculateRequest(BaseModel):
    myLocation: Optional[str] = None
    clientLocation: Optional[str] = None
    currentRate: Any = None
    skill: Optional[str] = None


class EmailRequest(BaseModel):
    fairRate: Any = None
    currentRate: Any = None
    skill: Optional[str] = None
    clientLocation: Optional[str] = None


class LoginRequest(BaseModel):
    password: Optional[str] = None
