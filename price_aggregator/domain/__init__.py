"""
Domain package for the price aggregator.

This package contains the vendor-independent records that adapters
normalize into, and the static offer mapping used by mapping-only vendors.
"""
