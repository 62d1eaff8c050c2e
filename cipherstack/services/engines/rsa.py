import base64
from typing import ClassVar

from cipherstack.core.exceptions import DecryptionError, EncryptionError, ValidationError
from cipherstack.models.schemas import CipherFamily, Direction, LayerConfig
from cipherstack.services.engines.base import LayerEngine
from cipherstack.services.engines.registry import EngineRegistry


@EngineRegistry.register
class RsaEngine(LayerEngine):
    """
    RSA layer engine.

    The UTF-8 plaintext is split into chunks small enough for one padded
    RSA block each. Every chunk is encrypted independently, base64
    encoded, and the chunks are joined with '|'.
    """

    name = "RSA"
    family = CipherFamily.ASYMMETRIC
    description = "Asymmetric cipher applied chunk by chunk with PEM-encoded keys."

    CHUNK_DELIMITER: ClassVar[str] = "|"

    def validate(self, config: LayerConfig, direction: Direction) -> None:
        if direction is Direction.ENCRYPT and not config.public_key:
            raise ValidationError("RSA public key is required")
        if direction is Direction.DECRYPT and not config.private_key:
            raise ValidationError("RSA private key is required")

    def encrypt(self, plaintext: str, config: LayerConfig) -> str:
        public_key = config.public_key or ""

        try:
            data = plaintext.encode("utf-8")
            chunk_size = self.provider.rsa_chunk_size(public_key)
            chunks = self.chunk(data, chunk_size)
            encrypted = [
                base64.b64encode(self.provider.rsa_encrypt(public_key, chunk)).decode("ascii")
                for chunk in chunks
            ]
        except (ValueError, TypeError) as e:
            raise EncryptionError(f"RSA encryption failed: {e}") from e

        return self.CHUNK_DELIMITER.join(encrypted)

    def decrypt(self, ciphertext: str, config: LayerConfig) -> str:
        private_key = config.private_key or ""
        encrypted_chunks = ciphertext.split(self.CHUNK_DELIMITER)

        # all chunks or nothing
        plaintext = bytearray()
        for index, chunk in enumerate(encrypted_chunks):
            try:
                raw = base64.b64decode(chunk.strip(), validate=True)
                plaintext.extend(self.provider.rsa_decrypt(private_key, raw))
            except (ValueError, TypeError) as e:
                raise DecryptionError(
                    "RSA decryption failed. Invalid key or corrupted data.",
                    {"chunk": index, "chunks": len(encrypted_chunks), "reason": str(e)},
                ) from e

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionError(
                "RSA decryption produced invalid UTF-8 data",
                {"reason": str(e)},
            ) from e

    @staticmethod
    def chunk(data: bytes, size: int) -> list[bytes]:
        """Split data into ``size``-byte chunks; empty data is one empty chunk."""
        if size <= 0:
            raise ValueError("RSA key too small to hold any plaintext")
        if not data:
            return [b""]
        return [data[i:i + size] for i in range(0, len(data), size)]
