"""
Adapters package for the price aggregator.

This package contains components for integrating with grocery vendor APIs:
- Abstract interfaces that define the adaptor and normalizer contracts
- Concrete implementations for each vendor
- Factory and registry for building the configured adaptors
"""

from . import interfaces

from .factory import AdaptorFactory
from .registry import AdaptorRegistry

__all__ = [
    'interfaces',
    'AdaptorFactory',
    'AdaptorRegistry',
]
