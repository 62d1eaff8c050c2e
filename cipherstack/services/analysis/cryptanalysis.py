import re
from dataclasses import dataclass
from typing import ClassVar

from cipherstack.core.exceptions import InsufficientSampleError, ValidationError
from cipherstack.models.schemas import (
    AnalysisReport,
    AsymmetricReport,
    ChunkStatistics,
    CipherFamily,
    InsufficientDataResult,
    KeyCharacteristics,
    SelfKeyingReport,
    SymmetricReport,
)
from cipherstack.services.analysis.patterns import PatternDetector
from cipherstack.services.analysis.statistics import StatisticalAnalyzer


@dataclass(frozen=True)
class RsaKeySizeBreakpoints:
    """Average base64 chunk length above which a key size is assumed."""

    bits_4096: int = 683
    bits_2048: int = 342
    bits_1024: int = 171


class SymmetricAnalyzer:
    """
    Format, entropy and ECB heuristics for AES ciphertext.

    The mode guess only looks for a 32-hex-digit IV prefix; the block
    repeat check works on the text, not on decoded bytes.
    """

    IV_FORMAT: ClassVar[re.Pattern[str]] = re.compile(r"^[0-9a-fA-F]{32}:.+$", re.DOTALL)
    BASE64_FORMAT: ClassVar[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9+/=]+$")

    BLOCK_SIZE: ClassVar[str] = "128 bits"

    def __init__(self, statistics: StatisticalAnalyzer, patterns: PatternDetector):
        self.statistics = statistics
        self.patterns = patterns

    def analyze(self, ciphertext: str) -> SymmetricReport:
        has_iv = bool(self.IV_FORMAT.match(ciphertext))
        is_base64 = bool(self.BASE64_FORMAT.match(ciphertext))
        entropy = self.statistics.entropy(ciphertext)

        if has_iv:
            mode = "Likely CBC or CTR (has IV)"
        else:
            mode = "Possibly ECB (no IV detected)"
        possibly_ecb = not has_iv

        has_repeats = self.patterns.detect_repeating_blocks(ciphertext)

        if has_repeats and possibly_ecb:
            key_strength = "Potentially vulnerable - ECB mode with repeating patterns detected"
        else:
            key_strength = "Strong - brute force attack is infeasible"

        if has_repeats:
            weaknesses = "Repeating block patterns detected - could indicate ECB mode or data redundancy"
        else:
            weaknesses = "No obvious repeating block patterns"

        return SymmetricReport(
            format="Has IV prefix (CBC/CTR mode)" if has_iv else "No IV detected (possibly ECB mode)",
            encoding="Likely Base64 encoded" if is_base64 else "Not standard Base64 encoding",
            has_iv=has_iv,
            entropy=entropy,
            entropy_interpretation=self.statistics.interpret_entropy(entropy),
            block_size=self.BLOCK_SIZE,
            detected_mode=mode,
            has_repeating_blocks=has_repeats,
            weaknesses=weaknesses,
            key_strength=key_strength,
            recommendations=self._recommendations(possibly_ecb),
            general_analysis=self.statistics.frequency_analysis(ciphertext),
        )

    def _recommendations(self, possibly_ecb: bool) -> list[str]:
        return [
            "AES is considered secure when implemented correctly",
            "Consider using CBC or CTR mode instead of ECB"
            if possibly_ecb
            else "CBC/CTR mode provides better security than ECB",
            "Use a strong, unique key of sufficient length (at least 128 bits)",
            "For maximum security, use AES-256 with a strong key derivation function",
        ]


class AsymmetricAnalyzer:
    """
    Chunk structure and key-size heuristics for RSA ciphertext.

    The key size is estimated from average base64 chunk length only;
    the modulus is never inspected.
    """

    CHUNK_DELIMITER: ClassVar[str] = "|"
    BASE64_FORMAT: ClassVar[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9+/=]+$")
    BREAKPOINTS: ClassVar[RsaKeySizeBreakpoints] = RsaKeySizeBreakpoints()

    # Chunk counts from which up to two distinct lengths still count as consistent
    CONSISTENT_MIN_CHUNKS: ClassVar[int] = 5

    RECOMMENDATIONS: ClassVar[list[str]] = [
        "RSA keys should be at least 2048 bits in modern applications",
        "RSA should be combined with proper padding schemes (PKCS#1 v2 or OAEP)",
        "For large data, use RSA to encrypt a symmetric key, then encrypt data with AES",
    ]

    def __init__(self, statistics: StatisticalAnalyzer):
        self.statistics = statistics

    def analyze(self, ciphertext: str) -> AsymmetricReport:
        is_chunked = self.CHUNK_DELIMITER in ciphertext
        chunks = ciphertext.split(self.CHUNK_DELIMITER) if is_chunked else [ciphertext]
        is_base64 = all(self.BASE64_FORMAT.match(chunk) for chunk in chunks)

        lengths = [len(chunk) for chunk in chunks]
        average = sum(lengths) / len(lengths)
        unique_lengths = len(set(lengths))
        consistent = unique_lengths == 1 or (
            len(chunks) >= self.CONSISTENT_MIN_CHUNKS and unique_lengths <= 2
        )

        estimated = self.estimate_key_size(average) if is_base64 else "Unknown"
        entropy = self.statistics.entropy(ciphertext)

        return AsymmetricReport(
            format=(
                "Multiple chunks separated by '|' - standard RSA format"
                if is_chunked
                else "Single chunk - possibly small data or non-standard format"
            ),
            encoding="Base64 encoded (expected for RSA)" if is_base64 else "Not standard Base64 encoding",
            entropy=entropy,
            entropy_interpretation=self.statistics.interpret_entropy(entropy),
            chunks=ChunkStatistics(
                count=len(chunks),
                average_length=round(average),
                consistent=consistent,
            ),
            estimated_key_size=estimated,
            key_strength=self.evaluate_key_strength(estimated),
            recommendations=list(self.RECOMMENDATIONS),
            general_analysis=self.statistics.frequency_analysis(ciphertext),
        )

    def estimate_key_size(self, average_chunk_length: float) -> str:
        if average_chunk_length > self.BREAKPOINTS.bits_4096:
            return "4096 bits or higher"
        elif average_chunk_length > self.BREAKPOINTS.bits_2048:
            return "~2048 bits"
        elif average_chunk_length > self.BREAKPOINTS.bits_1024:
            return "~1024 bits"
        return "Less than 1024 bits (not recommended)"

    @staticmethod
    def evaluate_key_strength(estimated_key_size: str) -> str:
        if "4096" in estimated_key_size:
            return "Very strong - suitable for long-term security"
        elif "2048" in estimated_key_size:
            return "Strong - currently recommended minimum size"
        elif "1024" in estimated_key_size:
            return "Weak - considered insufficient by modern standards"
        return "Unknown strength or potentially very weak"


class SelfKeyingAnalyzer:
    """
    Frequency, IC and Kasiski analysis for Autokey ciphertext.

    Candidate primer letters pair the six most frequent ciphertext
    letters with the six most frequent English letters.
    """

    COMMON_ENGLISH: ClassVar[str] = "ETAOIN"
    TOP_CIPHER_LETTERS: ClassVar[int] = 6
    TOP_FREQUENCIES: ClassVar[int] = 10
    TOP_SEQUENCES: ClassVar[int] = 5
    ESTIMATED_LENGTH: ClassVar[str] = "Unknown (Autokey uses plaintext as part of the key)"

    def __init__(
        self,
        statistics: StatisticalAnalyzer,
        patterns: PatternDetector,
        min_sample: int = 20,
    ):
        self.statistics = statistics
        self.patterns = patterns
        self.min_sample = min_sample

    def analyze(self, ciphertext: str) -> SelfKeyingReport | InsufficientDataResult:
        letters = self.statistics.clean(ciphertext)

        if len(letters) < self.min_sample:
            return InsufficientDataResult(
                error=(
                    "Text too short for reliable analysis. "
                    f"Need at least {self.min_sample} characters."
                ),
                sample_size=len(letters),
            )

        try:
            ic = self.statistics.index_of_coincidence(letters)
        except InsufficientSampleError as e:
            return InsufficientDataResult(error=e.message, sample_size=e.sample_size)

        frequencies = self.statistics.letter_frequencies(letters)
        repeats = self.patterns.find_repeating_sequences(letters)

        return SelfKeyingReport(
            key_characteristics=KeyCharacteristics(
                possible_first_letters=self.possible_first_letters(
                    [f.character for f in frequencies[:self.TOP_CIPHER_LETTERS]]
                ),
                estimated_length=self.ESTIMATED_LENGTH,
            ),
            frequencies=frequencies[:self.TOP_FREQUENCIES],
            ic=ic,
            interpretation=self.statistics.interpret_ic(ic),
            repeating_sequences=repeats[:self.TOP_SEQUENCES],
        )

    def possible_first_letters(self, cipher_letters: list[str]) -> list[str]:
        """Invert Vigenère addition for each (cipher, English) pair, deduplicated in order."""
        candidates: dict[str, None] = {}
        for cipher_letter in cipher_letters:
            for plain_letter in self.COMMON_ENGLISH:
                shift = (ord(cipher_letter) - ord(plain_letter) + 26) % 26
                candidates[chr(shift + ord("A"))] = None
        return list(candidates)


class CryptanalysisEngine:
    """
    Entry point for ciphertext analysis.

    Dispatches to one analyzer per cipher family. Analysis is advisory:
    too little data yields an InsufficientDataResult, never an exception.
    """

    def __init__(
        self,
        statistics: StatisticalAnalyzer | None = None,
        patterns: PatternDetector | None = None,
        min_sample: int = 20,
    ):
        self.statistics = statistics or StatisticalAnalyzer()
        self.patterns = patterns or PatternDetector()
        self._analyzers = {
            CipherFamily.SYMMETRIC: SymmetricAnalyzer(self.statistics, self.patterns),
            CipherFamily.ASYMMETRIC: AsymmetricAnalyzer(self.statistics),
            CipherFamily.SELF_KEYING: SelfKeyingAnalyzer(self.statistics, self.patterns, min_sample),
        }

    def analyze(self, text: str, family: CipherFamily) -> AnalysisReport:
        """
        Analyze ciphertext assumed to come from ``family``.

        Raises:
            ValidationError: empty text or a family without an analyzer
        """
        if not text:
            raise ValidationError("Text to analyze is required")

        analyzer = self._analyzers.get(family)
        if analyzer is None:
            raise ValidationError(
                "Valid algorithm (aes, rsa, or autokey) is required",
                {"algorithm": family.value},
            )

        return analyzer.analyze(text)
