"""
Naming Services
===============
Storage key derivation.
"""

from upload_service.services.naming.key_namer import KeyNamer

__all__ = ["KeyNamer"]
