from typing import Type

from cipherstack.core.exceptions import EngineNotFoundError
from cipherstack.models.schemas import CipherFamily
from cipherstack.services.engines.base import LayerEngine
from cipherstack.services.primitives.base import CryptoProvider


class EngineRegistry:
    """
    Registry for layer engines.

    Engine classes register per cipher family at import time; each
    registry instance builds engines bound to its own primitive provider.
    """

    _engines: dict[CipherFamily, Type[LayerEngine]] = {}

    def __init__(self, provider: CryptoProvider):
        self.provider = provider
        self._instances: dict[CipherFamily, LayerEngine] = {}

    @classmethod
    def register(cls, engine_class: Type[LayerEngine]) -> Type[LayerEngine]:
        """
        Register an engine class.

        Can be used as a decorator:
            @EngineRegistry.register
            class AesEngine(LayerEngine):
                ...
        """
        cls._engines[engine_class.family] = engine_class
        return engine_class

    def get_engine(self, family: CipherFamily) -> LayerEngine:
        """
        Get the engine instance for a cipher family.

        Raises:
            EngineNotFoundError: if nothing is registered for the family
        """
        if family not in self._engines:
            raise EngineNotFoundError(family.value)

        # Lazy instantiation with caching
        if family not in self._instances:
            self._instances[family] = self._engines[family](self.provider)

        return self._instances[family]

    @classmethod
    def list_registered(cls) -> list[CipherFamily]:
        return list(cls._engines.keys())

    @classmethod
    def is_registered(cls, family: CipherFamily) -> bool:
        return family in cls._engines


# Import engines to trigger registration
def _load_engines() -> None:
    """Load all engine modules to trigger registration."""
    from cipherstack.services.engines import aes, autokey, rsa  # noqa: F401


# Load engines when module is imported
_load_engines()
