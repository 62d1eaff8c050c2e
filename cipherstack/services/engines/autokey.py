import base64
import binascii
import logging
import string
from typing import ClassVar

from cipherstack.core.exceptions import DecryptionError, EncryptionError, ValidationError
from cipherstack.models.schemas import CipherFamily, Direction, LayerConfig
from cipherstack.services.engines.base import LayerEngine
from cipherstack.services.engines.registry import EngineRegistry
from cipherstack.services.preprocessing.normalizer import LayerNormalizer

logger = logging.getLogger(__name__)


@EngineRegistry.register
class AutokeyEngine(LayerEngine):
    """
    Autokey cipher engine.

    The Autokey cipher is a variant of Vigenère where the key is extended
    using the plaintext itself. Here the primer is a single letter derived
    from an integer key: ((n mod 26) + 26) mod 26, with 0 mapped to 26,
    then 1 -> A ... 26 -> Z.

    Non-letters are kept in place and the case of every letter is kept.
    Binary-looking input is base64 encoded and tagged with ``BASE64:``
    before the letter transform.
    """

    name = "Autokey"
    family = CipherFamily.SELF_KEYING
    description = (
        "A polyalphabetic cipher where the key is extended using the plaintext. "
        "After a single primer letter, the plaintext letters become the key."
    )

    ALPHABET: ClassVar[str] = string.ascii_uppercase
    LETTERS: ClassVar[frozenset[str]] = frozenset(string.ascii_letters)
    BINARY_MARKER: ClassVar[str] = "BASE64:"

    def validate(self, config: LayerConfig, direction: Direction) -> None:
        if config.key is None or not config.key.strip():
            raise ValidationError("Autokey cipher key is required")
        try:
            self.parse_key(config.key)
        except ValueError:
            raise ValidationError(
                "Autokey cipher key should be a valid numeric value",
                {"key": config.key},
            )

    def encrypt(self, plaintext: str, config: LayerConfig) -> str:
        primer = self.key_letter(self.parse_key(config.key or ""))

        if LayerNormalizer.is_binary_like(plaintext):
            logger.debug("Binary-looking input, base64 encoding before Autokey")
            return self._encrypt_wrapped(plaintext, primer)

        encrypted = self._encrypt(plaintext, primer)
        # output must never be mistaken for a wrapped payload
        if encrypted.startswith(self.BINARY_MARKER):
            return self._encrypt_wrapped(plaintext, primer)
        return encrypted

    def decrypt(self, ciphertext: str, config: LayerConfig) -> str:
        primer = self.key_letter(self.parse_key(config.key or ""))

        if ciphertext.startswith(self.BINARY_MARKER):
            encoded = self._decrypt(ciphertext[len(self.BINARY_MARKER):], primer)
            try:
                return base64.b64decode(encoded).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError) as e:
                raise DecryptionError(
                    "Autokey decryption failed: could not decode base64 payload",
                    {"reason": str(e)},
                ) from e

        return self._decrypt(ciphertext, primer)

    @staticmethod
    def parse_key(key: str) -> int:
        """Parse the integer key; negative and large values are valid."""
        return int(key.strip())

    @classmethod
    def key_letter(cls, key: int) -> str:
        """Reduce an integer key to its primer letter (1 -> A, 26 or 0 -> Z)."""
        reduced = ((key % 26) + 26) % 26
        if reduced == 0:
            reduced = 26
        return cls.ALPHABET[reduced - 1]

    def _encrypt_wrapped(self, plaintext: str, primer: str) -> str:
        """Base64 the UTF-8 text, encrypt it and tag it with the marker."""
        try:
            encoded = base64.b64encode(plaintext.encode("utf-8")).decode("ascii")
        except UnicodeEncodeError as e:
            raise EncryptionError(
                "Autokey encryption failed: text is not valid UTF-8",
                {"reason": str(e)},
            ) from e
        return self.BINARY_MARKER + self._encrypt(encoded, primer)

    def _encrypt(self, plaintext: str, primer: str) -> str:
        """Encrypt using Autokey cipher."""
        letters = [c.upper() for c in plaintext if self._is_letter(c)]
        if not letters:
            return plaintext

        # Build full key: primer + plaintext
        full_key = primer + "".join(letters)

        result = []
        key_idx = 0
        for char in plaintext:
            if self._is_letter(char):
                shift = self.ALPHABET.index(full_key[key_idx])
                encrypted = self.ALPHABET[(self.ALPHABET.index(char.upper()) + shift) % 26]
                result.append(encrypted if char.isupper() else encrypted.lower())
                key_idx += 1
            else:
                result.append(char)

        return "".join(result)

    def _decrypt(self, ciphertext: str, primer: str) -> str:
        """Decrypt using Autokey cipher."""
        # Start with primer as key
        key = [primer]
        key_idx = 0

        result = []
        for char in ciphertext:
            if self._is_letter(char):
                shift = self.ALPHABET.index(key[key_idx])
                plain = self.ALPHABET[(self.ALPHABET.index(char.upper()) - shift) % 26]
                result.append(plain if char.isupper() else plain.lower())

                # Add decrypted character to key for next iteration
                key.append(plain)
                key_idx += 1
            else:
                result.append(char)

        return "".join(result)

    def _is_letter(self, char: str) -> bool:
        return char in self.LETTERS
