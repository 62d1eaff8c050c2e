"""Shared fixtures."""

import pytest

from cipherstack.services.primitives import PyCryptodomeProvider


@pytest.fixture(scope="session")
def provider():
    return PyCryptodomeProvider()


@pytest.fixture(scope="session")
def rsa_key_pair(provider):
    """2048-bit (public_pem, private_pem); generated once per session."""
    return provider.generate_rsa_keypair(2048)


@pytest.fixture(scope="session")
def other_rsa_key_pair(provider):
    return provider.generate_rsa_keypair(2048)
