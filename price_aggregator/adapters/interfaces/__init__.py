"""
Interfaces package for the vendor adaptors.

Abstract bases that standardize how vendor APIs are called and how their
responses are normalized.
"""

from .normalizer import ResponseNormalizer
from .vendor_adapter import CapabilityType, FailurePolicy, VendorAdaptor, VendorCapabilities

__all__ = [
    'CapabilityType',
    'FailurePolicy',
    'ResponseNormalizer',
    'VendorAdaptor',
    'VendorCapabilities',
]
