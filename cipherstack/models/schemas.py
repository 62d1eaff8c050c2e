from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Enums
# ============================================================================


class CipherFamily(str, Enum):
    """Cipher families a pipeline layer can use."""

    NONE = "none"
    SYMMETRIC = "aes"
    ASYMMETRIC = "rsa"
    SELF_KEYING = "autokey"

    @property
    def label(self) -> str:
        return _FAMILY_LABELS[self]


_FAMILY_LABELS = {
    CipherFamily.NONE: "None",
    CipherFamily.SYMMETRIC: "AES",
    CipherFamily.ASYMMETRIC: "RSA",
    CipherFamily.SELF_KEYING: "Autokey",
}


class Direction(str, Enum):
    """Pipeline traversal direction."""

    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


class AesMode(str, Enum):
    """Supported block cipher modes."""

    ECB = "ECB"
    CBC = "CBC"
    CTR = "CTR"

    @property
    def requires_iv(self) -> bool:
        return self is not AesMode.ECB


class StepAction(str, Enum):
    """Kinds of entries in the processing log."""

    SKIP = "skip"
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"
    NORMALIZE = "normalize"
    COMPLETE = "complete"


# ============================================================================
# Pipeline Schemas
# ============================================================================


class LayerConfig(BaseModel):
    """
    One pipeline stage.

    Only the fields relevant to ``algorithm`` are meaningful; the rest
    are ignored.
    """

    algorithm: CipherFamily = CipherFamily.NONE
    key: str | None = None
    key_size: int = 128
    mode: AesMode = AesMode.CBC
    public_key: str | None = None
    private_key: str | None = None

    @property
    def is_active(self) -> bool:
        return self.algorithm is not CipherFamily.NONE


class ProcessingStep(BaseModel):
    """A single immutable line of the processing log."""

    model_config = ConfigDict(frozen=True)

    layer: int | None = None
    action: StepAction
    message: str
    note: str | None = None

    def __str__(self) -> str:
        return self.message


# ============================================================================
# Statistics Schemas
# ============================================================================


class FrequencyEntry(BaseModel):
    """Letter frequency data."""

    model_config = ConfigDict(frozen=True)

    character: str
    count: int
    frequency_percent: float = Field(ge=0.0, le=100.0)


class RepeatingSequence(BaseModel):
    """A substring that occurs more than once in a text."""

    model_config = ConfigDict(frozen=True)

    sequence: str
    length: int
    occurrences: int
    positions: list[int]
    distances: list[int]


class InsufficientDataResult(BaseModel):
    """Returned in place of a report when the sample cannot be analyzed."""

    model_config = ConfigDict(frozen=True)

    error: str
    sample_size: int = 0


class GeneralAnalysis(BaseModel):
    """Letter frequency and Index of Coincidence summary."""

    model_config = ConfigDict(frozen=True)

    total_sample: int
    frequencies: list[FrequencyEntry]
    ic: float
    interpretation: str


# ============================================================================
# Analysis Reports
# ============================================================================


class SymmetricReport(BaseModel):
    """Heuristic report for AES-style ciphertext."""

    model_config = ConfigDict(frozen=True)

    format: str
    encoding: str
    has_iv: bool
    entropy: float
    entropy_interpretation: str
    block_size: str
    detected_mode: str
    has_repeating_blocks: bool
    weaknesses: str
    key_strength: str
    recommendations: list[str]
    general_analysis: GeneralAnalysis | InsufficientDataResult | None = None


class ChunkStatistics(BaseModel):
    """Length statistics of '|'-delimited ciphertext chunks."""

    model_config = ConfigDict(frozen=True)

    count: int
    average_length: int
    consistent: bool


class AsymmetricReport(BaseModel):
    """Heuristic report for chunked RSA ciphertext."""

    model_config = ConfigDict(frozen=True)

    format: str
    encoding: str
    entropy: float
    entropy_interpretation: str
    chunks: ChunkStatistics
    estimated_key_size: str
    key_strength: str
    recommendations: list[str]
    general_analysis: GeneralAnalysis | InsufficientDataResult | None = None


class KeyCharacteristics(BaseModel):
    """What can be guessed about an Autokey key."""

    model_config = ConfigDict(frozen=True)

    possible_first_letters: list[str]
    estimated_length: str


class SelfKeyingReport(BaseModel):
    """Frequency and repeat analysis for Autokey ciphertext."""

    model_config = ConfigDict(frozen=True)

    key_characteristics: KeyCharacteristics
    frequencies: list[FrequencyEntry]
    ic: float
    interpretation: str
    repeating_sequences: list[RepeatingSequence]


AnalysisReport = Union[
    SymmetricReport,
    AsymmetricReport,
    SelfKeyingReport,
    InsufficientDataResult,
]


# ============================================================================
# Request Schemas
# ============================================================================


class ProcessRequest(BaseModel):
    """Request schema for /process endpoint."""

    text: str = Field(min_length=1)
    action: Direction
    layers: list[LayerConfig] = Field(min_length=1)


class AnalyzeRequest(BaseModel):
    """Request schema for /analyze endpoint."""

    text: str = Field(min_length=1)
    algorithm: CipherFamily


class KeyPairRequest(BaseModel):
    """Request schema for /keys/rsa endpoint."""

    key_size: int | None = None


# ============================================================================
# Response Schemas
# ============================================================================


class ProcessResponse(BaseModel):
    """Response schema for /process endpoint."""

    result: str
    steps: list[ProcessingStep]


class AnalyzeResponse(BaseModel):
    """Response schema for /analyze endpoint."""

    algorithm: CipherFamily
    result: AnalysisReport


class KeyPairResponse(BaseModel):
    """Response schema for /keys/rsa endpoint."""

    public_key: str
    private_key: str
    key_size: int


# ============================================================================
# Error Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    message: str
    details: dict = Field(default_factory=dict)
