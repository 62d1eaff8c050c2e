from typing import Any


class CipherStackError(Exception):
    """Base exception for all pipeline and analysis errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(CipherStackError):
    """Raised when input validation fails before any processing."""

    pass


class EngineError(CipherStackError):
    """Base exception for cipher engine errors."""

    pass


class EngineNotFoundError(EngineError):
    """Raised when no engine is registered for a cipher family."""

    def __init__(self, family: str):
        super().__init__(
            f"No cipher engine registered for '{family}'",
            {"family": family},
        )


class EncryptionError(EngineError):
    """Raised when a layer fails to encrypt."""

    pass


class DecryptionError(EngineError):
    """Raised when a layer fails to decrypt."""

    pass


class LayerError(CipherStackError):
    """
    Raised when a pipeline layer fails.

    Carries the step log accumulated up to the failing layer.
    """

    def __init__(
        self,
        layer_index: int,
        family: str,
        message: str,
        steps: list[Any] | None = None,
    ):
        self.layer_index = layer_index
        self.family = family
        self.steps = list(steps or [])
        super().__init__(
            message,
            {"layer": layer_index, "family": family},
        )


class AnalysisInputError(CipherStackError):
    """Raised when a sample cannot be analyzed."""

    pass


class InsufficientSampleError(AnalysisInputError):
    """Raised when a statistic is undefined for the given sample size."""

    def __init__(self, sample_size: int, required: int):
        self.sample_size = sample_size
        self.required = required
        super().__init__(
            f"Insufficient sample: {sample_size} letters, need at least {required}",
            {"sample_size": sample_size, "required": required},
        )


class KeyGenerationError(CipherStackError):
    """Raised when key-pair generation fails."""

    pass
