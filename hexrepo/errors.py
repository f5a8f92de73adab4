# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RegistryError(Exception):
	"""
	A structured, serializable error for repository trust decisions.

	Callers branch on the subclass (or `reason_code`), never on `message`.
	"""

	reason_code: str
	message: str
	repo: str | None = None
	organization: str | None = None
	hint: str | None = None

	def __str__(self) -> str:
		return self.format_human()

	def to_dict(self) -> dict[str, Any]:
		return {
			"reason_code": self.reason_code,
			"message": self.message,
			"repo": self.repo,
			"organization": self.organization,
			"hint": self.hint,
		}

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.reason_code}] {self.message}"]
		if self.repo:
			parts.append(f"repo={self.repo}")
		if self.organization:
			parts.append(f"organization={self.organization}")
		if self.hint:
			parts.append(f"hint: {self.hint}")
		return " ".join(parts)


class UnknownRepository(RegistryError):
	pass


class UnknownOrganization(RegistryError):
	pass


class MissingPublicKey(RegistryError):
	pass


class InvalidPublicKey(RegistryError):
	pass


class VerificationFailed(RegistryError):
	"""Signature check failed: key mismatch, corruption or tampering in transit."""


class MalformedEnvelope(RegistryError):
	pass


def unknown_repository(name: str) -> UnknownRepository:
	return UnknownRepository(
		reason_code="REPO_UNKNOWN",
		message=f"Unknown repository {name!r}",
		repo=name,
		hint="add new repositories with the `mix hex.repo add` task",
	)


def unknown_organization(organization: str) -> UnknownOrganization:
	return UnknownOrganization(
		reason_code="ORGANIZATION_UNKNOWN",
		message=f"Unknown organization {organization!r}",
		repo=f"hexpm:{organization}",
		organization=organization,
		hint="add new organizations with the `mix hex.organization auth` task",
	)


def missing_public_key(repo: str) -> MissingPublicKey:
	return MissingPublicKey(
		reason_code="PUBLIC_KEY_MISSING",
		message=f"No public key stored for {repo}",
		repo=repo,
		hint=(
			"either install a public key with `mix hex.repo` or disable the registry "
			"verification check by setting `HEX_UNSAFE_REGISTRY=1`"
		),
	)


def invalid_public_key(repo: str) -> InvalidPublicKey:
	return InvalidPublicKey(
		reason_code="PUBLIC_KEY_INVALID",
		message="invalid public key",
		repo=repo,
		hint=f"the public key configured for {repo} could not be loaded; re-install it with `mix hex.repo`",
	)


def verification_failed(repo: str, *, key_hint: str) -> VerificationFailed:
	return VerificationFailed(
		reason_code="REGISTRY_UNVERIFIED",
		message=(
			"Could not verify authenticity of fetched registry file. This may happen "
			"because a proxy or some entity is interfering with the download or because "
			"you don't have a public key to verify the registry"
		),
		repo=repo,
		hint=f"you may try again later or check if a new public key has been released {key_hint}",
	)


def malformed_envelope(repo: str | None, detail: str) -> MalformedEnvelope:
	return MalformedEnvelope(
		reason_code="REGISTRY_MALFORMED",
		message=f"registry file is not a signed envelope: {detail}",
		repo=repo,
	)
