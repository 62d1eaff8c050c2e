from abc import ABC, abstractmethod

from cipherstack.models.schemas import AesMode


class CryptoProvider(ABC):
    """
    Primitive cipher operations the pipeline depends on.

    Implementations raise ValueError for any bad key, bad padding or
    malformed input; engines translate that into their own errors.
    """

    AES_BLOCK_SIZE = 16

    @abstractmethod
    def random_bytes(self, n: int) -> bytes:
        """Return ``n`` bytes from a cryptographically strong source."""
        pass

    @abstractmethod
    def aes_encrypt(
        self,
        key: bytes,
        mode: AesMode,
        data: bytes,
        iv: bytes | None = None,
    ) -> bytes:
        """
        Encrypt with AES.

        ECB and CBC apply PKCS#7 padding; CTR is unpadded and uses the
        whole IV as the initial counter block.
        """
        pass

    @abstractmethod
    def aes_decrypt(
        self,
        key: bytes,
        mode: AesMode,
        data: bytes,
        iv: bytes | None = None,
    ) -> bytes:
        """Inverse of aes_encrypt, including padding removal."""
        pass

    @abstractmethod
    def rsa_chunk_size(self, public_pem: str) -> int:
        """Largest plaintext chunk in bytes a single RSA block can hold."""
        pass

    @abstractmethod
    def rsa_encrypt(self, public_pem: str, chunk: bytes) -> bytes:
        pass

    @abstractmethod
    def rsa_decrypt(self, private_pem: str, chunk: bytes) -> bytes:
        pass

    @abstractmethod
    def generate_rsa_keypair(self, bits: int) -> tuple[str, str]:
        """
        Generate an RSA key pair.

        Returns:
            (public_pem, private_pem)
        """
        pass
