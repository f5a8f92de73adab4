# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from hexrepo.config_v0 import HEXPM, RepositoryConfig, RepoSettings
from hexrepo.crypto import public_pem_from_private


def _private_pem(key) -> bytes:
	return key.private_bytes(
		encoding=serialization.Encoding.PEM,
		format=serialization.PrivateFormat.PKCS8,
		encryption_algorithm=serialization.NoEncryption(),
	)


@pytest.fixture(scope="session")
def rsa_private_pem() -> bytes:
	return _private_pem(rsa.generate_private_key(public_exponent=65537, key_size=2048))


@pytest.fixture(scope="session")
def rsa_public_pem(rsa_private_pem: bytes) -> bytes:
	return public_pem_from_private(rsa_private_pem)


@pytest.fixture(scope="session")
def other_rsa_public_pem() -> bytes:
	return public_pem_from_private(_private_pem(rsa.generate_private_key(public_exponent=65537, key_size=2048)))


@pytest.fixture(scope="session")
def ed25519_private_pem() -> bytes:
	return _private_pem(Ed25519PrivateKey.generate())


@pytest.fixture()
def settings(rsa_public_pem: bytes) -> RepoSettings:
	return RepoSettings(
		repos={
			HEXPM: RepositoryConfig(name=HEXPM, url="https://repo.hex.pm", public_key=rsa_public_pem),
			"hexpm:acme": RepositoryConfig(
				name="hexpm:acme",
				url="https://repo.hex.pm/repos/acme",
				public_key=rsa_public_pem,
				auth_key="acme-secret",
			),
			"internal": RepositoryConfig(name="internal", url="https://pkgs.internal.example"),
		}
	)
