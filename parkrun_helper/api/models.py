"""Pydantic models for API requests and responses."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Any, Dict, List, Optional
from datetime import datetime

from ..backup.models import BackupOptions
from ..sanitization import sanitize_email, sanitize_identifier, sanitize_phone, sanitize_text


class HelperCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=200)
    parkrun_id: str = Field(..., min_length=1, max_length=20, alias="parkrunId")
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=32)

    @field_validator("name", mode="before")
    @classmethod
    def clean_name(cls, v):
        return sanitize_text(v) if isinstance(v, str) else v

    @field_validator("parkrun_id", mode="before")
    @classmethod
    def clean_parkrun_id(cls, v):
        return sanitize_identifier(v) if isinstance(v, str) else v

    @field_validator("email", mode="before")
    @classmethod
    def clean_email(cls, v):
        if isinstance(v, str):
            return sanitize_email(v) or None
        return v

    @field_validator("phone", mode="before")
    @classmethod
    def clean_phone(cls, v):
        if isinstance(v, str):
            return sanitize_phone(v) or None
        return v

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class HelperUpdate(HelperCreate):
    """Partial update; only the fields sent are changed."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    parkrun_id: Optional[str] = Field(default=None, min_length=1, max_length=20, alias="parkrunId")

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)


class HelperResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str
    parkrun_id: str = Field(..., alias="parkrunId")
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")
    created_by: str = Field(..., alias="createdBy")


class IncrementalBackupRequest(BackupOptions):
    # Any JSON value; parse_since rejects everything but an ISO-8601 string
    since: Optional[Any] = Field(default=None, description="ISO-8601 instant; only changes at or after it are included")


class HealthStatus(BaseModel):
    status: str  # "healthy", "unhealthy"
    database: bool
    timestamp: datetime
    service: str = "parkrun-helper-backend"
    version: str


class IndicatorResult(BaseModel):
    """Outcome of one dependency check."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    healthy: bool
    response_time: Optional[int] = Field(default=None, alias="responseTime")  # ms
    details: Dict[str, Any] = Field(default_factory=dict)


class HealthReport(BaseModel):
    status: str  # "ok", "error"
    timestamp: datetime
    checks: List[IndicatorResult]


class HealthSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    healthy: int
    unhealthy: int
    health_percentage: int = Field(..., alias="healthPercentage")


class SystemInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uptime: float  # seconds
    python_version: str = Field(..., alias="pythonVersion")
    platform: str
    pid: int
    environment: str


class DetailedHealthReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str  # "healthy", "degraded", "unhealthy"
    timestamp: datetime
    total_duration: int = Field(..., alias="totalDuration")  # ms
    checks: List[IndicatorResult]
    summary: HealthSummary
    system: SystemInfo


class SecureData(BaseModel):
    message: str
    timestamp: datetime
    user: Dict[str, Any]
    data: Dict[str, Any]
