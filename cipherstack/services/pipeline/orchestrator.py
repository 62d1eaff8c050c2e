"""
Pipeline orchestrator - drives a request through its cipher layers.

1. Validate every layer before any cryptographic work
2. Walk layers forward to encrypt, backward to decrypt
3. Normalize data between consecutive active layers
4. Stop at the first failing layer with the partial log
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from cipherstack.core.exceptions import EngineError, LayerError, ValidationError
from cipherstack.models.schemas import (
    CipherFamily,
    Direction,
    LayerConfig,
    ProcessingStep,
    StepAction,
)
from cipherstack.services.engines.registry import EngineRegistry
from cipherstack.services.preprocessing.normalizer import LayerNormalizer
from cipherstack.services.primitives.base import CryptoProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    """Transformed text together with its ordered processing log."""

    result: str
    steps: list[ProcessingStep]


class PipelineOrchestrator:
    """
    Runs text through an ordered sequence of layer configs.

    Layers are numbered from 1 in the log. A ``none`` layer is logged as
    skipped and leaves the data untouched, so an all-``none`` pipeline is
    a pass-through unless ``require_active_layer`` is set. The
    orchestrator keeps no state between calls.
    """

    def __init__(
        self,
        provider: CryptoProvider,
        normalizer: LayerNormalizer | None = None,
        max_layers: int | None = None,
        require_active_layer: bool = False,
    ):
        self.registry = EngineRegistry(provider)
        self.normalizer = normalizer or LayerNormalizer()
        self.max_layers = max_layers
        self.require_active_layer = require_active_layer

    def process(
        self,
        text: str,
        direction: Direction,
        layers: Sequence[LayerConfig],
    ) -> PipelineResult:
        """
        Encrypt or decrypt text through all layers.

        Args:
            text: Input text
            direction: ENCRYPT walks layers first to last, DECRYPT last to first
            layers: Layer configs in slot order

        Returns:
            PipelineResult with the final text and the full log

        Raises:
            ValidationError: input or any layer config is invalid
            LayerError: a layer failed; carries the log up to that layer
        """
        self.validate(text, direction, layers)

        steps: list[ProcessingStep] = []
        data = text
        previous_family: CipherFamily | None = None

        for index in self._traversal_order(len(layers), direction):
            layer = layers[index]
            number = index + 1

            if not layer.is_active:
                steps.append(ProcessingStep(
                    layer=number,
                    action=StepAction.SKIP,
                    message=f"Layer {number}: No encryption selected, skipping",
                ))
                continue

            engine = self.registry.get_engine(layer.algorithm)

            if previous_family is not None:
                normalized = self.normalizer.normalize_full(data, previous_family, layer.algorithm)
                data = normalized.data
                if normalized.changed:
                    logger.info(
                        "Layer %d: %s output re-encoded for %s (%s)",
                        number, previous_family.label, layer.algorithm.label, normalized.note,
                    )
                steps.append(ProcessingStep(
                    layer=number,
                    action=StepAction.NORMALIZE,
                    message=(
                        f"Normalized {previous_family.label} output for "
                        f"{layer.algorithm.label} {direction.value}"
                    ),
                    note=normalized.note,
                ))

            steps.append(ProcessingStep(
                layer=number,
                action=StepAction(direction.value),
                message=f"Processing Layer {number}: {engine.describe(layer)} {direction.value}",
            ))
            logger.info("Layer %d: %s %s", number, engine.describe(layer), direction.value)

            try:
                data = engine.transform(data, layer, direction)
            except EngineError as e:
                logger.error(
                    "Layer %d (%s) failed to %s: %s",
                    number, layer.algorithm.value, direction.value, e.message,
                )
                raise LayerError(
                    layer_index=number,
                    family=layer.algorithm.value,
                    message=f"Layer {number}: {e.message}",
                    steps=steps,
                ) from e

            previous_family = layer.algorithm

        steps.append(ProcessingStep(
            action=StepAction.COMPLETE,
            message=f"{direction.value.capitalize()}ion complete!",
        ))

        return PipelineResult(result=data, steps=steps)

    def validate(
        self,
        text: str,
        direction: Direction,
        layers: Sequence[LayerConfig],
    ) -> None:
        """
        Pre-flight checks; nothing is transformed or logged.

        Raises:
            ValidationError: describing the first problem found
        """
        if not text:
            raise ValidationError("Text to process is required")

        if not layers:
            raise ValidationError("At least one layer configuration is required")

        if self.max_layers is not None and len(layers) > self.max_layers:
            raise ValidationError(
                f"At most {self.max_layers} layers are supported",
                {"layers": len(layers), "max_layers": self.max_layers},
            )

        if self.require_active_layer and not any(layer.is_active for layer in layers):
            raise ValidationError("At least one layer must use an encryption algorithm")

        for index, layer in enumerate(layers):
            if not layer.is_active:
                continue
            engine = self.registry.get_engine(layer.algorithm)
            try:
                engine.validate(layer, direction)
            except ValidationError as e:
                raise ValidationError(
                    f"{e.message} (Layer {index + 1})",
                    {**e.details, "layer": index + 1},
                ) from e

    @staticmethod
    def _traversal_order(count: int, direction: Direction) -> range:
        if direction is Direction.ENCRYPT:
            return range(count)
        return range(count - 1, -1, -1)
