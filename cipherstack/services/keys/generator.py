import logging
from collections.abc import Iterable
from dataclasses import dataclass

from cipherstack.core.exceptions import KeyGenerationError, ValidationError
from cipherstack.services.primitives.base import CryptoProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RsaKeyPair:
    """PEM-encoded RSA key pair."""

    public_key: str
    private_key: str
    key_size: int


class KeyService:
    """Generates key material for the RSA layer."""

    def __init__(
        self,
        provider: CryptoProvider,
        allowed_sizes: Iterable[int] = (1024, 2048, 4096),
    ):
        self.provider = provider
        self.allowed_sizes = tuple(allowed_sizes)

    def generate_rsa_keypair(self, key_size: int = 2048) -> RsaKeyPair:
        """
        Generate a PEM key pair.

        Raises:
            ValidationError: key size not allowed
            KeyGenerationError: the provider failed
        """
        if key_size not in self.allowed_sizes:
            raise ValidationError(
                f"RSA key size must be one of {', '.join(map(str, self.allowed_sizes))} bits",
                {"key_size": key_size},
            )

        try:
            public_key, private_key = self.provider.generate_rsa_keypair(key_size)
        except ValueError as e:
            logger.error("RSA key generation failed: %s", e)
            raise KeyGenerationError(f"Error generating RSA key pair: {e}") from e

        return RsaKeyPair(public_key=public_key, private_key=private_key, key_size=key_size)
