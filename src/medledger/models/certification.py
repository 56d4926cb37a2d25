"""Certification models"""

from enum import Enum

from pydantic import BaseModel, Field

from medledger.models.identity import Identity


class CertificationType(str, Enum):
    """Supported certification types"""
    FDA = "FDA"
    CE = "CE"
    ISO = "ISO"
    SAFETY = "Safety"

    @property
    def ordinal(self) -> int:
        return list(CertificationType).index(self)


class CertificationRecord(BaseModel):
    """Certification issued for one device and type"""

    device_id: int = Field(..., description="Certified device")
    cert_type: CertificationType = Field(..., description="Certification type")
    issuer: Identity = Field(..., description="Regulatory body that issued it")
    sequence_number: int = Field(..., description="Global sequence number", ge=1)
    valid: bool = Field(default=True, description="Validity flag")

    model_config = {"frozen": True}
