"""Primitive cipher providers injected into the layer engines."""

from cipherstack.services.primitives.base import CryptoProvider
from cipherstack.services.primitives.pycryptodome import PyCryptodomeProvider

__all__ = [
    "CryptoProvider",
    "PyCryptodomeProvider",
]
