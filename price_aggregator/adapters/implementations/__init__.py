"""
Concrete vendor adaptor implementations.

Each module pairs an adaptor with the normalizer for its vendor's
response shape.
"""

from .kroger import KrogerAdaptor, KrogerNormalizer
from .walmart import WalmartAdaptor, WalmartNormalizer

__all__ = [
    'KrogerAdaptor',
    'KrogerNormalizer',
    'WalmartAdaptor',
    'WalmartNormalizer',
]
