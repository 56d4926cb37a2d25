"""Services module initialization"""

from medledger.services.sequence import SequenceGenerator
from medledger.services.transaction import Transaction
from medledger.services.authorization import AuthorizationPolicy, RegulatoryRegistry
from medledger.services.device_registry import DeviceRegistry
from medledger.services.certification_registry import CertificationRegistry

__all__ = [
    "SequenceGenerator",
    "Transaction",
    "AuthorizationPolicy",
    "RegulatoryRegistry",
    "DeviceRegistry",
    "CertificationRegistry",
]
