import re
from typing import ClassVar

from cipherstack.models.schemas import RepeatingSequence


class PatternDetector:
    """
    Structural pattern detection on ciphertext.

    Two independent scans:
    - Kasiski-style repeated substrings (periodic key hints)
    - Fixed-width block repeats (ECB fingerprinting)

    Both are heuristics over the text representation; nothing is decoded
    back to raw bytes first.
    """

    MIN_SEQUENCE_LENGTH: ClassVar[int] = 3
    MAX_SEQUENCE_LENGTH: ClassVar[int] = 10

    HEX_BLOCK_WIDTH: ClassVar[int] = 32
    TEXT_BLOCK_WIDTH: ClassVar[int] = 24

    IV_PREFIX: ClassVar[re.Pattern[str]] = re.compile(r"^[^:]*:")
    HEX_ONLY: ClassVar[re.Pattern[str]] = re.compile(r"^[0-9a-fA-F]+$")

    def find_repeating_sequences(self, text: str) -> list[RepeatingSequence]:
        """
        Find substrings of length 3..10 that occur more than once.

        Lengths above a third of the text are not scanned. Results are
        sorted by occurrence count, then length, both descending.

        Args:
            text: Cleaned text (uppercase letters only)

        Returns:
            All repeating sequences; callers slice the prefix they need
        """
        sequences = []

        for length in range(self.MIN_SEQUENCE_LENGTH, self.MAX_SEQUENCE_LENGTH + 1):
            if length > len(text) / 3:
                break

            seen: dict[str, list[int]] = {}
            for i in range(len(text) - length + 1):
                seen.setdefault(text[i:i + length], []).append(i)

            for seq, positions in seen.items():
                if len(positions) > 1:
                    distances = [
                        positions[i + 1] - positions[i]
                        for i in range(len(positions) - 1)
                    ]
                    sequences.append(RepeatingSequence(
                        sequence=seq,
                        length=length,
                        occurrences=len(positions),
                        positions=positions,
                        distances=distances,
                    ))

        # stable: equal keys keep scan order
        sequences.sort(key=lambda s: (-s.occurrences, -s.length))
        return sequences

    def block_width(self, text: str) -> int:
        """32 characters for hex text (16 bytes), else 24 as a base64 proxy."""
        if self.HEX_ONLY.match(text):
            return self.HEX_BLOCK_WIDTH
        return self.TEXT_BLOCK_WIDTH

    def detect_repeating_blocks(self, ciphertext: str) -> bool:
        """
        Flag whether any fixed-width block of the ciphertext repeats.

        A leading ``iv:`` prefix is removed first. Only full blocks are
        compared.
        """
        body = self.IV_PREFIX.sub("", ciphertext, count=1)
        width = self.block_width(body)

        seen: set[str] = set()
        for i in range(0, len(body) - width + 1, width):
            block = body[i:i + width]
            if block in seen:
                return True
            seen.add(block)

        return False
