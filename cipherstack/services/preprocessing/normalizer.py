import base64
from dataclasses import dataclass
from typing import ClassVar

from cipherstack.models.schemas import CipherFamily


@dataclass(frozen=True)
class NormalizedData:
    """Result of normalizing data between two layers."""

    data: str
    source: CipherFamily
    target: CipherFamily
    changed: bool
    note: str


class LayerNormalizer:
    """
    Normalizes data passed from one pipeline layer to the next.

    Rules:
    - AES -> RSA or Autokey: unchanged (AES output is already text safe)
    - RSA or Autokey -> AES: base64 encode if the data looks binary
    - Anything else, or empty data: unchanged
    """

    # Share of non-printable characters above which text counts as binary
    BINARY_THRESHOLD: ClassVar[float] = 0.2

    TEXT_FAMILIES: ClassVar[frozenset[CipherFamily]] = frozenset({
        CipherFamily.ASYMMETRIC,
        CipherFamily.SELF_KEYING,
    })

    @classmethod
    def is_binary_like(cls, text: str) -> bool:
        """True when more than 20% of characters fall outside printable ASCII."""
        if not isinstance(text, str) or not text:
            return False

        non_printable = sum(1 for char in text if ord(char) < 32 or ord(char) > 126)
        return non_printable / len(text) > cls.BINARY_THRESHOLD

    def normalize(
        self,
        data: str,
        source: CipherFamily,
        target: CipherFamily,
    ) -> str:
        """
        Condition one layer's output as input for the next layer.

        Args:
            data: Output of the producing layer
            source: Family of the producing layer
            target: Family of the consuming layer

        Returns:
            Data safe for the consuming layer
        """
        return self.normalize_full(data, source, target).data

    def normalize_full(
        self,
        data: str,
        source: CipherFamily,
        target: CipherFamily,
    ) -> NormalizedData:
        """Normalize and report what, if anything, was changed."""
        if not isinstance(data, str) or not data:
            return self._unchanged(data, source, target, "empty input")

        if source is CipherFamily.SYMMETRIC and target in self.TEXT_FAMILIES:
            return self._unchanged(data, source, target, "AES output is already text safe")

        if source in self.TEXT_FAMILIES and target is CipherFamily.SYMMETRIC:
            if self.is_binary_like(data):
                encoded = base64.b64encode(data.encode("utf-8")).decode("ascii")
                return NormalizedData(
                    data=encoded,
                    source=source,
                    target=target,
                    changed=True,
                    note="binary-looking data re-encoded as base64",
                )
            return self._unchanged(data, source, target, "text data passed through")

        return self._unchanged(data, source, target, "no conversion needed")

    def _unchanged(
        self,
        data: str,
        source: CipherFamily,
        target: CipherFamily,
        note: str,
    ) -> NormalizedData:
        return NormalizedData(
            data=data,
            source=source,
            target=target,
            changed=False,
            note=note,
        )
