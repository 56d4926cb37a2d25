"""Utilities module initialization"""

from medledger.utils.logger import StructuredFormatter, configure_logging

__all__ = ["StructuredFormatter", "configure_logging"]
