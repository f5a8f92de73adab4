# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Registry payload verification.

`verify_registry` is the gate every fetched registry file passes before any
package metadata inside it is used:

  PERMISSIVE -> decode only, payload returned unchecked
  STRICT     -> key present? -> signature valid? -> payload

Verification is deterministic for a given (body, key), so nothing here
retries. A caller that suspects corruption in transit re-fetches and calls
again.
"""

from __future__ import annotations

import logging

from hexrepo.config_v0 import HEXPM, RepositoryConfig, RepoSettings, TrustMode, resolve_repo
from hexrepo.crypto import BadKey
from hexrepo.errors import invalid_public_key, malformed_envelope, missing_public_key, verification_failed
from hexrepo.signed_v0 import EnvelopeDecodeError, Unverified, decode_and_verify_signed, decode_signed

logger = logging.getLogger(__name__)

PUBLIC_KEYS_PAGE = "https://hex.pm/docs/public_keys"


def public_key_message(repo: str) -> str:
	if repo.startswith(HEXPM):
		return f"on our public keys page: {PUBLIC_KEYS_PAGE}"
	return f"for repo {repo}"


def verify_registry(body: bytes, repo: RepositoryConfig, mode: TrustMode) -> bytes:
	if mode is TrustMode.PERMISSIVE:
		logger.warning("registry verification disabled, trusting unchecked payload from %s", repo.name)
		try:
			return decode_signed(body).payload
		except EnvelopeDecodeError as err:
			logger.error("registry response from %s (%s) could not be decoded: %s", repo.name, repo.url, err)
			raise malformed_envelope(repo.name, str(err)) from err

	if repo.public_key is None:
		raise missing_public_key(repo.name)

	try:
		payload = decode_and_verify_signed(body, repo.public_key)
	except BadKey as err:
		raise invalid_public_key(repo.name) from err
	except Unverified as err:
		logger.error(
			"registry signature verification failed for %s (%s); the download may have been tampered with",
			repo.name,
			repo.url,
		)
		raise verification_failed(repo.name, key_hint=public_key_message(repo.name)) from err
	except EnvelopeDecodeError as err:
		logger.error("registry response from %s (%s) could not be decoded: %s", repo.name, repo.url, err)
		raise malformed_envelope(repo.name, str(err)) from err

	logger.debug("verified registry payload from %s (%d bytes)", repo.name, len(payload))
	return payload


def verify_for(settings: RepoSettings, body: bytes, name: str | None = None) -> bytes:
	"""Resolve `name` and verify `body` under the settings' trust mode."""
	return verify_registry(body, resolve_repo(settings, name), settings.trust_mode)
