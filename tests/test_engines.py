"""Tests for the AES, RSA and Autokey layer engines."""

import base64
import re

import pytest

from cipherstack.core.exceptions import DecryptionError, EncryptionError, ValidationError
from cipherstack.models.schemas import AesMode, CipherFamily, Direction, LayerConfig
from cipherstack.services.engines.aes import AesEngine
from cipherstack.services.engines.autokey import AutokeyEngine
from cipherstack.services.engines.registry import EngineRegistry
from cipherstack.services.engines.rsa import RsaEngine


class TestEngineRegistry:
    """Test the engine registry."""

    def test_all_families_registered(self):
        registered = EngineRegistry.list_registered()

        for family in (CipherFamily.SYMMETRIC, CipherFamily.ASYMMETRIC, CipherFamily.SELF_KEYING):
            assert family in registered, f"{family} not registered"

        assert not EngineRegistry.is_registered(CipherFamily.NONE)

    def test_engines_share_the_registry_provider(self, provider):
        registry = EngineRegistry(provider)

        engine = registry.get_engine(CipherFamily.SYMMETRIC)

        assert isinstance(engine, AesEngine)
        assert engine.provider is provider
        assert registry.get_engine(CipherFamily.SYMMETRIC) is engine


class TestAesEngine:
    """Test the AES engine."""

    KEY_16 = "0123456789ABCDEF"

    @pytest.fixture
    def engine(self, provider):
        return AesEngine(provider)

    def config(self, mode=AesMode.CBC, key=KEY_16, key_size=128):
        return LayerConfig(
            algorithm=CipherFamily.SYMMETRIC,
            key=key,
            key_size=key_size,
            mode=mode,
        )

    def test_cbc_roundtrip_with_iv_prefix(self, engine):
        config = self.config()

        encrypted = engine.encrypt("HELLO", config)

        assert encrypted.count(":") == 1
        iv_hex, body = encrypted.split(":")
        assert re.fullmatch(r"[0-9a-f]{32}", iv_hex)
        assert body
        assert engine.decrypt(encrypted, config) == "HELLO"

    @pytest.mark.parametrize("mode", list(AesMode))
    @pytest.mark.parametrize(
        "key, key_size",
        [
            ("0123456789ABCDEF", 128),
            ("0123456789ABCDEF01234567", 192),
            ("0123456789ABCDEF0123456789ABCDEF", 256),
        ],
    )
    def test_roundtrip_all_modes_and_sizes(self, engine, mode, key, key_size):
        config = self.config(mode=mode, key=key, key_size=key_size)
        plaintext = "Attack at dawn! Ünïcödé ✓"

        encrypted = engine.encrypt(plaintext, config)

        assert engine.decrypt(encrypted, config) == plaintext

    def test_ecb_has_no_iv(self, engine):
        encrypted = engine.encrypt("HELLO", self.config(mode=AesMode.ECB))

        assert ":" not in encrypted
        assert len(base64.b64decode(encrypted)) == 16

    def test_fresh_iv_per_call(self, engine):
        config = self.config()

        assert engine.encrypt("same text", config) != engine.encrypt("same text", config)

    def test_missing_iv_falls_back_to_zero_iv(self, engine, provider):
        config = self.config()
        key = AesEngine.normalize_key(config.key, 128)
        body = base64.b64encode(
            provider.aes_encrypt(key, AesMode.CBC, b"zero iv text", bytes(16))
        ).decode()

        assert engine.decrypt(body, config) == "zero iv text"

    def test_lenient_retry_accepts_unpadded_base64(self, engine):
        config = self.config(mode=AesMode.ECB)
        encrypted = engine.encrypt("retry me", config)
        mangled = encrypted.rstrip("=").replace("+", "-").replace("/", "_")

        assert engine.decrypt(mangled, config) == "retry me"

    def test_wrong_key_raises_decryption_error(self, engine):
        encrypted = engine.encrypt("secret message", self.config())

        with pytest.raises(DecryptionError):
            engine.decrypt(encrypted, self.config(key="FEDCBA9876543210"))

    def test_garbage_raises_decryption_error(self, engine):
        with pytest.raises(DecryptionError):
            engine.decrypt("not a ciphertext at all", self.config(mode=AesMode.ECB))

    def test_normalize_key_repeats_and_truncates(self):
        assert AesEngine.normalize_key("abc", 128) == b"abcabcabcabcabca"
        assert AesEngine.normalize_key("0123456789ABCDEF", 128) == b"0123456789ABCDEF"
        assert len(AesEngine.normalize_key("k", 256)) == 32

    def test_validate_requires_exact_key_length(self, engine):
        engine.validate(self.config(), Direction.ENCRYPT)

        with pytest.raises(ValidationError, match="exactly 16 characters"):
            engine.validate(self.config(key="short"), Direction.ENCRYPT)
        with pytest.raises(ValidationError, match="exactly 32 characters"):
            engine.validate(self.config(key_size=256), Direction.DECRYPT)

    def test_validate_rejects_bad_key_size_and_missing_key(self, engine):
        with pytest.raises(ValidationError):
            engine.validate(self.config(key_size=64, key="01234567"), Direction.ENCRYPT)
        with pytest.raises(ValidationError, match="required"):
            engine.validate(self.config(key=None), Direction.ENCRYPT)


class TestRsaEngine:
    """Test the chunked RSA engine."""

    @pytest.fixture
    def engine(self, provider):
        return RsaEngine(provider)

    @pytest.fixture
    def config(self, rsa_key_pair):
        public_key, private_key = rsa_key_pair
        return LayerConfig(
            algorithm=CipherFamily.ASYMMETRIC,
            public_key=public_key,
            private_key=private_key,
        )

    def test_short_text_single_chunk(self, engine, config):
        encrypted = engine.encrypt("HELLO", config)

        assert "|" not in encrypted
        assert engine.decrypt(encrypted, config) == "HELLO"

    def test_long_text_is_chunked(self, engine, config):
        plaintext = "The quick brown fox jumps over the lazy dog. " * 20

        encrypted = engine.encrypt(plaintext, config)
        chunks = encrypted.split("|")

        assert len(chunks) >= 2
        assert engine.decrypt(encrypted, config) == plaintext

    def test_each_chunk_decrypts_independently(self, engine, config):
        plaintext = "x" * 245 + "y" * 10

        chunks = engine.encrypt(plaintext, config).split("|")

        assert len(chunks) == 2
        assert engine.decrypt(chunks[0], config) == "x" * 245
        assert engine.decrypt(chunks[1], config) == "y" * 10

    def test_multibyte_text_split_across_chunks(self, engine, config):
        plaintext = "ü" * 300

        encrypted = engine.encrypt(plaintext, config)

        assert engine.decrypt(encrypted, config) == plaintext

    def test_wrong_private_key_fails_whole_layer(self, engine, config, other_rsa_key_pair):
        encrypted = engine.encrypt("HELLO " * 100, config)
        wrong = config.model_copy(update={"private_key": other_rsa_key_pair[1]})

        with pytest.raises(DecryptionError):
            engine.decrypt(encrypted, wrong)

    def test_corrupted_chunk_fails(self, engine, config):
        encrypted = engine.encrypt("HELLO", config)

        with pytest.raises(DecryptionError):
            engine.decrypt(encrypted + "|bm90IHJzYQ==", config)

    def test_unencodable_text_raises_encryption_error(self, engine, config):
        with pytest.raises(EncryptionError):
            engine.encrypt("ab\ud800", config)

    def test_invalid_public_key_fails_encryption(self, engine):
        config = LayerConfig(algorithm=CipherFamily.ASYMMETRIC, public_key="not a pem")

        with pytest.raises(EncryptionError):
            engine.encrypt("HELLO", config)

    def test_validate_key_for_direction(self, engine):
        public_only = LayerConfig(algorithm=CipherFamily.ASYMMETRIC, public_key="pem")

        engine.validate(public_only, Direction.ENCRYPT)
        with pytest.raises(ValidationError, match="private key"):
            engine.validate(public_only, Direction.DECRYPT)
        with pytest.raises(ValidationError, match="public key"):
            engine.validate(LayerConfig(algorithm=CipherFamily.ASYMMETRIC), Direction.ENCRYPT)


class TestAutokeyEngine:
    """Test the self-keying Autokey engine."""

    @pytest.fixture
    def engine(self, provider):
        return AutokeyEngine(provider)

    def config(self, key):
        return LayerConfig(algorithm=CipherFamily.SELF_KEYING, key=str(key))

    @pytest.mark.parametrize(
        "key, letter",
        [(1, "A"), (2, "B"), (26, "Z"), (0, "Z"), (27, "A"), (-3, "W"), (-26, "Z"), (10**12, "L")],
    )
    def test_key_letter_reduction(self, key, letter):
        assert AutokeyEngine.key_letter(key) == letter

    def test_known_example(self, engine):
        """Key 1 -> primer A; case and punctuation preserved."""
        encrypted = engine.encrypt("Attack at Dawn!", self.config(1))

        assert encrypted == "Atmtcm kt Wdwj!"
        assert engine.decrypt(encrypted, self.config(1)) == "Attack at Dawn!"

    def test_keys_equal_mod_26_give_same_ciphertext(self, engine):
        plaintext = "Meet me near the old oak tree at 10pm."

        results = {engine.encrypt(plaintext, self.config(k)) for k in (7, 33, -19)}

        assert len(results) == 1

    def test_non_letters_and_case_preserved(self, engine):
        plaintext = "Hi, 2024 is HERE: ok? [yes] _under_score"

        encrypted = engine.encrypt(plaintext, self.config(5))

        assert len(encrypted) == len(plaintext)
        for original, output in zip(plaintext, encrypted):
            if original.isalpha():
                assert output.isupper() == original.isupper()
            else:
                assert output == original

    def test_no_letters_passthrough(self, engine):
        assert engine.encrypt("12345 !?", self.config(3)) == "12345 !?"

    def test_roundtrip(self, engine):
        plaintext = "The Autokey cipher extends its key with the plaintext."
        config = self.config(-42)

        assert engine.decrypt(engine.encrypt(plaintext, config), config) == plaintext

    def test_binary_input_is_base64_wrapped(self, engine):
        plaintext = "\x00\x01\x02\x03binary\x04\x05\x06"
        config = self.config(9)

        encrypted = engine.encrypt(plaintext, config)

        assert encrypted.startswith(AutokeyEngine.BINARY_MARKER)
        assert all(32 <= ord(c) <= 126 for c in encrypted)
        assert engine.decrypt(encrypted, config) == plaintext

    def test_output_resembling_marker_is_wrapped(self, engine):
        """Plain text whose ciphertext would start with the marker still round-trips."""
        plaintext = "BZTL64:hello world"
        config = self.config(1)

        encrypted = engine.encrypt(plaintext, config)

        assert encrypted.startswith(AutokeyEngine.BINARY_MARKER)
        assert encrypted != "BASE64:slpwz kkfco"
        assert engine.decrypt(encrypted, config) == plaintext

    def test_unencodable_text_raises_encryption_error(self, engine):
        with pytest.raises(EncryptionError):
            engine.encrypt("ab\ud800", self.config(3))

    def test_non_ascii_text_roundtrip(self, engine):
        plaintext = "日本語のテキスト"
        config = self.config(4)

        assert engine.decrypt(engine.encrypt(plaintext, config), config) == plaintext

    @pytest.mark.parametrize("key", ["abc", "", "  ", "1.5"])
    def test_validate_rejects_non_integer_keys(self, engine, key):
        with pytest.raises(ValidationError):
            engine.validate(self.config(key), Direction.ENCRYPT)

    def test_validate_accepts_negative_and_large(self, engine):
        engine.validate(self.config("-17"), Direction.ENCRYPT)
        engine.validate(self.config("123456789012345678901234567890"), Direction.DECRYPT)
