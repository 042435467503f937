from .credentials import VendorCredentials, VendorCredentialStore
from .oauth import TokenAuthStyle, TokenGrant, TokenManager, TokenStore, VendorToken

__all__ = [
    "TokenAuthStyle",
    "TokenGrant",
    "TokenManager",
    "TokenStore",
    "VendorCredentials",
    "VendorCredentialStore",
    "VendorToken",
]
