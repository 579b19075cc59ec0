"""Data models for token verification."""

from dataclasses import dataclass
from typing import Any, List, Optional

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class SigningKey:
    """Public key resolved from the remote key set."""

    key_id: str
    public_key: Any


@dataclass(frozen=True)
class CachedKey:
    key: SigningKey
    fetched_at: float


class VerifiedIdentity(BaseModel):
    """Caller identity extracted from a validated token."""

    user_id: str = Field(..., serialization_alias="userId")
    email: Optional[str] = None
    name: Optional[str] = None
    roles: List[str] = Field(default_factory=list)
    scopes: List[str] = Field(default_factory=list)
