from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from cipherstack.core.config import Settings, get_settings
from cipherstack.services.analysis.cryptanalysis import CryptanalysisEngine
from cipherstack.services.keys.generator import KeyService
from cipherstack.services.pipeline.orchestrator import PipelineOrchestrator
from cipherstack.services.primitives import CryptoProvider, PyCryptodomeProvider


# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]


@lru_cache
def get_provider() -> CryptoProvider:
    """Get the shared primitive provider."""
    return PyCryptodomeProvider()


ProviderDep = Annotated[CryptoProvider, Depends(get_provider)]


def get_orchestrator(settings: SettingsDep, provider: ProviderDep) -> PipelineOrchestrator:
    """Build a pipeline orchestrator for one request."""
    return PipelineOrchestrator(
        provider,
        max_layers=settings.max_layers,
        require_active_layer=settings.require_active_layer,
    )


OrchestratorDep = Annotated[PipelineOrchestrator, Depends(get_orchestrator)]


def get_cryptanalysis_engine(settings: SettingsDep) -> CryptanalysisEngine:
    """Build a cryptanalysis engine for one request."""
    return CryptanalysisEngine(min_sample=settings.self_keying_min_sample)


CryptanalysisDep = Annotated[CryptanalysisEngine, Depends(get_cryptanalysis_engine)]


def get_key_service(settings: SettingsDep, provider: ProviderDep) -> KeyService:
    """Build the key generation service."""
    return KeyService(provider, allowed_sizes=settings.allowed_rsa_key_sizes)


KeyServiceDep = Annotated[KeyService, Depends(get_key_service)]
