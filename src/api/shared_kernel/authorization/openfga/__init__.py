"""OpenFGA client implementation for authorization.

This module provides the OpenFGA HTTP client that implements the
RelationshipStore protocol, plus decoding of the store's model payloads.
"""

from shared_kernel.authorization.openfga.client import OpenFGAClient
from shared_kernel.authorization.openfga.codec import decode_model

__all__ = [
    "OpenFGAClient",
    "decode_model",
]
