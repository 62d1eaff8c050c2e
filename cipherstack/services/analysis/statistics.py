import math
import re
import string
from collections import Counter
from typing import ClassVar

from cipherstack.core.exceptions import InsufficientSampleError
from cipherstack.models.schemas import FrequencyEntry, GeneralAnalysis, InsufficientDataResult


class StatisticalAnalyzer:
    """
    Statistical measures used by the cryptanalysis engine.

    - Shannon entropy over the raw character distribution
    - Index of Coincidence over uppercase letters only
    - Letter frequency histogram
    - Fixed-threshold interpretations of both measures
    """

    ALPHABET: ClassVar[str] = string.ascii_uppercase
    NON_LETTERS: ClassVar[re.Pattern[str]] = re.compile(r"[^A-Z]")

    # (upper bound, interpretation); first bound the value is below wins
    ENTROPY_LEVELS: ClassVar[list[tuple[float, str]]] = [
        (3.0, "Very low entropy - likely not encrypted or highly structured data"),
        (4.0, "Low entropy - possibly simple encoding or simple cipher"),
        (5.0, "Moderate entropy - typical for text or simple encryption"),
        (7.0, "High entropy - characteristic of good encryption or compression"),
    ]
    ENTROPY_MAX_LEVEL: ClassVar[str] = "Very high entropy - strong encryption or random data"

    IC_HIGH: ClassVar[float] = 0.06
    IC_MID: ClassVar[float] = 0.045

    def clean(self, text: str) -> str:
        """Uppercase the text and strip everything that is not A-Z."""
        return self.NON_LETTERS.sub("", text.upper())

    def entropy(self, text: str) -> float:
        """
        Calculate Shannon entropy in bits per character.

        Computed over the characters as given, not over decoded bytes.
        """
        n = len(text)
        if n == 0:
            return 0.0

        entropy = 0.0
        for count in Counter(text).values():
            p = count / n
            entropy -= p * math.log2(p)

        return entropy

    def index_of_coincidence(self, text: str) -> float:
        """
        Calculate the Index of Coincidence of the letters in ``text``.

        - English text: ~0.0667
        - Random text: ~0.0385 (1/26)

        Raises:
            InsufficientSampleError: fewer than two letters in the sample
        """
        letters = self.clean(text)
        n = len(letters)
        if n < 2:
            raise InsufficientSampleError(n, 2)

        numerator = sum(f * (f - 1) for f in Counter(letters).values())
        return numerator / (n * (n - 1))

    def letter_frequencies(self, text: str) -> list[FrequencyEntry]:
        """Letter histogram sorted by count descending, ties by letter."""
        letters = self.clean(text)
        total = len(letters)
        if total == 0:
            return []

        counter = Counter(letters)
        ordered = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
        return [
            FrequencyEntry(
                character=char,
                count=count,
                frequency_percent=count / total * 100,
            )
            for char, count in ordered
        ]

    def interpret_ic(self, ic: float) -> str:
        if ic > self.IC_HIGH:
            return "High likelihood of simple substitution cipher or plaintext"
        elif ic > self.IC_MID:
            return "Possible polyalphabetic cipher (like Vigenère or Autokey)"
        else:
            return "Likely a more complex encryption or random/compressed data"

    def interpret_entropy(self, entropy: float) -> str:
        for bound, description in self.ENTROPY_LEVELS:
            if entropy < bound:
                return description
        return self.ENTROPY_MAX_LEVEL

    def frequency_analysis(self, text: str) -> GeneralAnalysis | InsufficientDataResult:
        """
        Summarize the letter content of a text.

        Returns an InsufficientDataResult instead of raising when the
        text has no letters or a single letter.
        """
        letters = self.clean(text)
        if not letters:
            return InsufficientDataResult(
                error="No alphabetic characters found in the text",
                sample_size=0,
            )

        try:
            ic = self.index_of_coincidence(letters)
        except InsufficientSampleError as e:
            return InsufficientDataResult(error=e.message, sample_size=e.sample_size)

        return GeneralAnalysis(
            total_sample=len(letters),
            frequencies=self.letter_frequencies(letters),
            ic=ic,
            interpretation=self.interpret_ic(ic),
        )
