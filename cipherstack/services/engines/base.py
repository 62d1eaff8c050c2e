from abc import ABC, abstractmethod
from typing import ClassVar

from cipherstack.models.schemas import CipherFamily, Direction, LayerConfig
from cipherstack.services.primitives.base import CryptoProvider


class LayerEngine(ABC):
    """
    Abstract base class for all pipeline layer engines.

    Each cipher family must provide:
    - validate(): Pre-flight check of a layer config for a direction
    - encrypt(): Transform text forward
    - decrypt(): Transform text back
    - describe(): Short label for the processing log
    """

    # Engine metadata
    name: ClassVar[str]
    family: ClassVar[CipherFamily]
    description: ClassVar[str]

    def __init__(self, provider: CryptoProvider):
        self.provider = provider

    @abstractmethod
    def validate(self, config: LayerConfig, direction: Direction) -> None:
        """
        Check that a config carries everything this family needs.

        Args:
            config: The layer configuration
            direction: Whether the layer will encrypt or decrypt

        Raises:
            ValidationError: if a required field is missing or malformed
        """
        pass

    @abstractmethod
    def encrypt(self, plaintext: str, config: LayerConfig) -> str:
        """
        Encrypt text with the layer's key material.

        Raises:
            EncryptionError: if the primitive rejects the input or key
        """
        pass

    @abstractmethod
    def decrypt(self, ciphertext: str, config: LayerConfig) -> str:
        """
        Decrypt text with the layer's key material.

        Raises:
            DecryptionError: if the primitive rejects the input or key
        """
        pass

    def describe(self, config: LayerConfig) -> str:
        """Label used in 'Processing Layer N: ...' log lines."""
        return self.name

    def transform(self, text: str, config: LayerConfig, direction: Direction) -> str:
        """Apply encrypt or decrypt depending on direction."""
        if direction is Direction.ENCRYPT:
            return self.encrypt(text, config)
        return self.decrypt(text, config)
