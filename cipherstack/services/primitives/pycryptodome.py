from functools import lru_cache

from Crypto.Cipher import AES, PKCS1_v1_5
from Crypto.PublicKey import RSA
from Crypto.Random import get_random_bytes
from Crypto.Util.Padding import pad, unpad

from cipherstack.models.schemas import AesMode
from cipherstack.services.primitives.base import CryptoProvider


@lru_cache(maxsize=32)
def _import_rsa_key(pem: str) -> RSA.RsaKey:
    # ValueError on malformed PEM
    return RSA.import_key(pem.strip())


class PyCryptodomeProvider(CryptoProvider):
    """CryptoProvider backed by PyCryptodome."""

    # PKCS#1 v1.5 encryption padding
    RSA_PADDING_OVERHEAD = 11

    def random_bytes(self, n: int) -> bytes:
        return get_random_bytes(n)

    def _aes_cipher(self, key: bytes, mode: AesMode, iv: bytes | None):
        if mode is AesMode.ECB:
            return AES.new(key, AES.MODE_ECB)

        iv = iv if iv is not None else bytes(self.AES_BLOCK_SIZE)
        if mode is AesMode.CBC:
            return AES.new(key, AES.MODE_CBC, iv=iv)
        return AES.new(key, AES.MODE_CTR, nonce=b"", initial_value=iv)

    def aes_encrypt(
        self,
        key: bytes,
        mode: AesMode,
        data: bytes,
        iv: bytes | None = None,
    ) -> bytes:
        cipher = self._aes_cipher(key, mode, iv)
        if mode is AesMode.CTR:
            return cipher.encrypt(data)
        return cipher.encrypt(pad(data, self.AES_BLOCK_SIZE))

    def aes_decrypt(
        self,
        key: bytes,
        mode: AesMode,
        data: bytes,
        iv: bytes | None = None,
    ) -> bytes:
        cipher = self._aes_cipher(key, mode, iv)
        if mode is AesMode.CTR:
            return cipher.decrypt(data)
        return unpad(cipher.decrypt(data), self.AES_BLOCK_SIZE)

    def rsa_chunk_size(self, public_pem: str) -> int:
        key = _import_rsa_key(public_pem)
        return key.size_in_bytes() - self.RSA_PADDING_OVERHEAD

    def rsa_encrypt(self, public_pem: str, chunk: bytes) -> bytes:
        key = _import_rsa_key(public_pem)
        return PKCS1_v1_5.new(key).encrypt(chunk)

    def rsa_decrypt(self, private_pem: str, chunk: bytes) -> bytes:
        key = _import_rsa_key(private_pem)
        if not key.has_private():
            raise ValueError("RSA decryption requires a private key")
        if len(chunk) != key.size_in_bytes():
            raise ValueError("Ciphertext chunk does not match the key size")

        sentinel = object()
        plaintext = PKCS1_v1_5.new(key).decrypt(chunk, sentinel)
        if plaintext is sentinel:
            raise ValueError("Invalid RSA padding")
        return plaintext

    def generate_rsa_keypair(self, bits: int) -> tuple[str, str]:
        key = RSA.generate(bits)
        private_pem = key.export_key(format="PEM").decode("ascii")
        public_pem = key.publickey().export_key(format="PEM").decode("ascii")
        return public_pem, private_pem
