"""Data models for the development TLS service."""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class SubjectInfo(BaseModel):
    """Distinguished-name fields of a certificate."""

    common_name: Optional[str] = Field(None, description="Common name")
    organization: Optional[str] = Field(None, description="Organization name")


class CertificateInfo(BaseModel):
    """Certificate information model."""

    subject: SubjectInfo = Field(..., description="Certificate subject information")
    issuer: SubjectInfo = Field(..., description="Certificate issuer information")
    serial_number: str = Field(..., description="Certificate serial number (decimal string)")
    not_valid_before: datetime = Field(..., description="Certificate start date")
    not_valid_after: datetime = Field(..., description="Certificate expiration date")
    dns_names: list[str] = Field(default_factory=list, description="Subject Alternative Names - DNS names")
    fingerprint_sha256: str = Field(..., description="SHA-256 fingerprint")


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = Field(..., description="Service status")
    common_name: Optional[str] = Field(None, description="Common name of the served certificate")
    expires_in_days: int = Field(..., description="Whole days until the certificate expires")
    timestamp: datetime = Field(..., description="Current server time")
