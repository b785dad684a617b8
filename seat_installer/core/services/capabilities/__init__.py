"""
Capability table package — static per-platform facts and their lookup.
"""

from seat_installer.core.services.capabilities.data import CAPABILITIES, PHP_EXT_PREFIX
from seat_installer.core.services.capabilities.table import (
    REQUIRED_CAPABILITIES,
    CapabilityTable,
    Found,
    LookupResult,
    Missing,
)

__all__ = [
    "CAPABILITIES",
    "CapabilityTable",
    "Found",
    "LookupResult",
    "Missing",
    "PHP_EXT_PREFIX",
    "REQUIRED_CAPABILITIES",
]
