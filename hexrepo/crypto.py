# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Signature primitives for registry envelopes.

Pinned policy:
- Public keys are PEM-encoded (SubjectPublicKeyInfo or PKCS#1 for RSA).
- RSA signatures are PKCS#1 v1.5 over SHA-512 of the payload bytes, the
  scheme used by the hex registry.
- Ed25519 keys are also accepted for self-hosted repositories.
"""

from __future__ import annotations

import hashlib

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

PublicKey = RSAPublicKey | Ed25519PublicKey


class BadKey(ValueError):
	"""Public key bytes could not be loaded."""


def sha256_hex(data: bytes) -> str:
	return hashlib.sha256(data).hexdigest()


def load_public_key(pem: bytes) -> PublicKey:
	try:
		key = serialization.load_pem_public_key(pem)
	except (ValueError, TypeError, UnsupportedAlgorithm) as err:
		raise BadKey("invalid public key PEM") from err
	if not isinstance(key, (RSAPublicKey, Ed25519PublicKey)):
		raise BadKey(f"unsupported public key type: {type(key).__name__}")
	return key


def verify_signature(key: PublicKey, payload: bytes, signature: bytes) -> bool:
	"""
	Verify `signature` over `payload`.

	Returns True on success, False on verification failure.
	"""
	try:
		if isinstance(key, RSAPublicKey):
			key.verify(signature, payload, padding.PKCS1v15(), hashes.SHA512())
		else:
			key.verify(signature, payload)
		return True
	except InvalidSignature:
		return False


def _load_private_key(private_pem: bytes) -> RSAPrivateKey | Ed25519PrivateKey:
	key = serialization.load_pem_private_key(private_pem, password=None)
	if not isinstance(key, (RSAPrivateKey, Ed25519PrivateKey)):
		raise ValueError(f"unsupported private key type: {type(key).__name__}")
	return key


def sign_payload(private_pem: bytes, payload: bytes) -> bytes:
	key = _load_private_key(private_pem)
	if isinstance(key, RSAPrivateKey):
		return key.sign(payload, padding.PKCS1v15(), hashes.SHA512())
	return key.sign(payload)


def public_pem_from_private(private_pem: bytes) -> bytes:
	key = _load_private_key(private_pem)
	return key.public_key().public_bytes(
		encoding=serialization.Encoding.PEM,
		format=serialization.PublicFormat.SubjectPublicKeyInfo,
	)
