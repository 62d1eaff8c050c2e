"""
Pipeline services for layered encryption.

A request's text is pushed through up to three cipher layers:
1. Every layer config is validated up front
2. Layers run in slot order to encrypt and in reverse to decrypt
3. Data is normalized between consecutive active layers
4. Each stage is recorded in an immutable processing log
"""

from cipherstack.services.pipeline.orchestrator import PipelineOrchestrator, PipelineResult

__all__ = [
    "PipelineOrchestrator",
    "PipelineResult",
]
