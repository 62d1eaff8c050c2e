import base64
import logging
import re
from typing import Callable, ClassVar

from cipherstack.core.exceptions import DecryptionError, EncryptionError, ValidationError
from cipherstack.models.schemas import AesMode, CipherFamily, Direction, LayerConfig
from cipherstack.services.engines.base import LayerEngine
from cipherstack.services.engines.registry import EngineRegistry

logger = logging.getLogger(__name__)


@EngineRegistry.register
class AesEngine(LayerEngine):
    """
    AES layer engine.

    Ciphertext is base64 of the raw cipher bytes. CBC and CTR generate a
    fresh 16-byte IV per call and emit ``<ivHex>:<base64>``.

    Decryption is deliberately lenient so multi-layer chains survive
    upstream re-encoding:
    - a missing or unreadable IV prefix falls back to an all-zero IV
    - a failed attempt is retried once with a lenient body decoder
    """

    name = "AES"
    family = CipherFamily.SYMMETRIC
    description = "Symmetric block cipher with 128, 192 or 256-bit keys in ECB, CBC or CTR mode."

    KEY_SIZES: ClassVar[tuple[int, ...]] = (128, 192, 256)
    IV_SIZE: ClassVar[int] = 16
    IV_SEPARATOR: ClassVar[str] = ":"
    IV_PREFIX: ClassVar[re.Pattern[str]] = re.compile(r"^([0-9a-fA-F]{32}):(.*)$", re.DOTALL)
    HEX_ONLY: ClassVar[re.Pattern[str]] = re.compile(r"^(?:[0-9a-fA-F]{2})+$")

    def validate(self, config: LayerConfig, direction: Direction) -> None:
        if not config.key:
            raise ValidationError("AES key is required")

        if config.key_size not in self.KEY_SIZES:
            raise ValidationError(
                f"AES key size must be one of {', '.join(map(str, self.KEY_SIZES))} bits",
                {"key_size": config.key_size},
            )

        required = config.key_size // 8
        if len(config.key) != required:
            raise ValidationError(
                f"AES key must be exactly {required} characters "
                f"for {config.key_size}-bit encryption",
                {"required_length": required, "actual_length": len(config.key)},
            )

    def describe(self, config: LayerConfig) -> str:
        return f"AES {config.mode.value}"

    def encrypt(self, plaintext: str, config: LayerConfig) -> str:
        key = self.normalize_key(config.key or "", config.key_size)
        mode = config.mode
        iv = self.provider.random_bytes(self.IV_SIZE) if mode.requires_iv else None

        try:
            ciphertext = self.provider.aes_encrypt(key, mode, plaintext.encode("utf-8"), iv)
        except ValueError as e:
            raise EncryptionError(f"AES encryption failed: {e}") from e

        body = base64.b64encode(ciphertext).decode("ascii")
        if iv is not None:
            return f"{iv.hex()}{self.IV_SEPARATOR}{body}"
        return body

    def decrypt(self, ciphertext: str, config: LayerConfig) -> str:
        key = self.normalize_key(config.key or "", config.key_size)
        mode = config.mode
        iv, body = self.split_iv(ciphertext, mode)

        try:
            return self._decrypt_body(key, mode, iv, body, self._decode_strict)
        except ValueError as e:
            logger.warning("Standard AES decryption failed (%s), retrying with lenient decoding", e)

        try:
            return self._decrypt_body(key, mode, iv, body, self._decode_lenient)
        except ValueError as e:
            raise DecryptionError(
                "AES decryption failed: all decryption attempts failed",
                {"mode": mode.value, "reason": str(e)},
            ) from e

    @staticmethod
    def normalize_key(key: str, key_size: int) -> bytes:
        """
        Repeat the key bytes and cut them to ``key_size / 8`` bytes.

        Deterministic padding so any non-empty key fills any size; this is
        not key stretching.
        """
        raw = key.encode("utf-8")
        if not raw:
            raise ValidationError("AES key is required")

        required = key_size // 8
        repeated = raw * (required // len(raw) + 1)
        return repeated[:required]

    def split_iv(self, ciphertext: str, mode: AesMode) -> tuple[bytes | None, str]:
        """
        Separate the ``ivHex:`` prefix from the body.

        Modes without an IV return the text untouched. When an IV is
        required but no valid prefix is present, an all-zero IV is used.
        """
        if not mode.requires_iv:
            return None, ciphertext

        match = self.IV_PREFIX.match(ciphertext)
        if match:
            return bytes.fromhex(match.group(1)), match.group(2)

        logger.warning("No IV prefix found for AES %s, falling back to a zero IV", mode.value)
        return bytes(self.IV_SIZE), ciphertext

    def _decrypt_body(
        self,
        key: bytes,
        mode: AesMode,
        iv: bytes | None,
        body: str,
        decode: Callable[[str], bytes],
    ) -> str:
        plaintext = self.provider.aes_decrypt(key, mode, decode(body), iv)
        result = plaintext.decode("utf-8")
        if not result:
            raise ValueError("Empty decryption result")
        return result

    @staticmethod
    def _decode_strict(body: str) -> bytes:
        return base64.b64decode(body, validate=True)

    def _decode_lenient(self, body: str) -> bytes:
        """Whitespace-tolerant decode accepting hex, url-safe or unpadded base64."""
        compact = "".join(body.split())
        if self.HEX_ONLY.match(compact) and len(compact) % (2 * self.IV_SIZE) == 0:
            return bytes.fromhex(compact)

        compact = compact.replace("-", "+").replace("_", "/").rstrip("=")
        compact += "=" * (-len(compact) % 4)
        return base64.b64decode(compact)
