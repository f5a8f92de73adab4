# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Repository configuration (v0).

Settings are built once (from a JSON file, the environment, or in code) and
then only read. Every operation takes the settings object explicitly; there
is no process-wide repository state.

Config file format (pinned for v0, JSON):
{
  "format": "hexrepo-config",
  "version": 0,
  "repos": {
    "<name>": { "url": "<base url>", "public_key": "<PEM text>", "auth_key": "<key>" }
  },
  "mirror_url": "<url>",        // optional, applies to "hexpm" only
  "unsafe_registry": false      // optional, true disables signature checks
}
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from hexrepo.errors import unknown_organization, unknown_repository

logger = logging.getLogger(__name__)

HEXPM = "hexpm"
HEXPM_URL = "https://repo.hex.pm"
ORGANIZATION_PREFIX = "hexpm:"

_TRUTHY = {"1", "true", "yes"}


class TrustMode(Enum):
	STRICT = "strict"
	PERMISSIVE = "permissive"


@dataclass(frozen=True)
class RepositoryConfig:
	name: str
	url: str
	public_key: bytes | None = None  # PEM bytes
	auth_key: str | None = None

	def to_dict(self) -> dict[str, Any]:
		return {
			"name": self.name,
			"url": self.url,
			"public_key": self.public_key.decode("ascii", errors="replace") if self.public_key is not None else None,
			"auth_key": "<redacted>" if self.auth_key else None,
		}


def _freeze_repos(repos: Mapping[str, RepositoryConfig]) -> Mapping[str, RepositoryConfig]:
	return MappingProxyType(dict(repos))


@dataclass(frozen=True)
class RepoSettings:
	repos: Mapping[str, RepositoryConfig] = field(default_factory=lambda: _freeze_repos({}))
	mirror_url: str | None = None
	trust_mode: TrustMode = TrustMode.STRICT

	def __post_init__(self) -> None:
		if not isinstance(self.repos, MappingProxyType):
			object.__setattr__(self, "repos", _freeze_repos(self.repos))


def default_settings() -> RepoSettings:
	return RepoSettings(repos={HEXPM: RepositoryConfig(name=HEXPM, url=HEXPM_URL)})


def fetch_repo(settings: RepoSettings, name: str | None) -> RepositoryConfig | None:
	"""
	Look up a repository, applying the mirror override.

	The mirror replaces only the `url` of the canonical `hexpm` entry; keys and
	every other repository (including `hexpm:<org>` entries) are untouched.
	"""
	name = HEXPM if name is None else name
	config = settings.repos.get(name)
	if config is None:
		return None
	if name == HEXPM and settings.mirror_url:
		return replace(config, url=settings.mirror_url)
	return config


def resolve_repo(settings: RepoSettings, name: str | None = None) -> RepositoryConfig:
	"""
	Resolve a repository name to its configuration.

	Raises UnknownOrganization for missing `hexpm:<org>` names and
	UnknownRepository for any other missing name.
	"""
	name = HEXPM if name is None else name
	config = fetch_repo(settings, name)
	if config is not None:
		return config
	if name.startswith(ORGANIZATION_PREFIX):
		raise unknown_organization(name[len(ORGANIZATION_PREFIX):])
	raise unknown_repository(name)


def _parse_repo(name: str, obj: Any) -> RepositoryConfig:
	if not isinstance(obj, dict):
		raise ValueError(f"repository '{name}' must be a JSON object")
	url = obj.get("url")
	if not isinstance(url, str) or not url:
		raise ValueError(f"repository '{name}' is missing a url")
	public_key = obj.get("public_key")
	if public_key is not None and not isinstance(public_key, str):
		raise ValueError(f"repository '{name}' public_key must be PEM text")
	auth_key = obj.get("auth_key")
	if auth_key is not None and not isinstance(auth_key, str):
		raise ValueError(f"repository '{name}' auth_key must be a string")
	return RepositoryConfig(
		name=name,
		url=url.rstrip("/"),
		public_key=public_key.encode("ascii") if public_key else None,
		auth_key=auth_key or None,
	)


def load_settings_json(path: Path) -> RepoSettings:
	try:
		obj = json.loads(path.read_text(encoding="utf-8"))
	except json.JSONDecodeError as err:
		raise ValueError(f"config file {path} is not valid JSON") from err
	if not isinstance(obj, dict):
		raise ValueError("config file must be a JSON object")
	if obj.get("format") != "hexrepo-config" or obj.get("version") != 0:
		raise ValueError("unsupported config format/version")

	repos_obj = obj.get("repos", {})
	if not isinstance(repos_obj, dict):
		raise ValueError("config repos must be a JSON object")
	repos: dict[str, RepositoryConfig] = {}
	for name, robj in repos_obj.items():
		repos[str(name)] = _parse_repo(str(name), robj)

	mirror_url = obj.get("mirror_url")
	if mirror_url is not None and not isinstance(mirror_url, str):
		raise ValueError("config mirror_url must be a string")
	unsafe = obj.get("unsafe_registry", False)
	if not isinstance(unsafe, bool):
		raise ValueError("config unsafe_registry must be a boolean")

	logger.debug("loaded %d repositories from %s", len(repos), path)
	return RepoSettings(
		repos=repos,
		mirror_url=mirror_url.rstrip("/") if mirror_url else None,
		trust_mode=TrustMode.PERMISSIVE if unsafe else TrustMode.STRICT,
	)


def settings_from_env(base: RepoSettings, environ: Mapping[str, str] | None = None) -> RepoSettings:
	"""
	Apply `HEX_MIRROR` and `HEX_UNSAFE_REGISTRY` on top of `base`.

	Returns a new settings object; `base` is not modified.
	"""
	env = os.environ if environ is None else environ
	out = base
	mirror = env.get("HEX_MIRROR")
	if mirror:
		out = replace(out, mirror_url=mirror.rstrip("/"))
	unsafe = env.get("HEX_UNSAFE_REGISTRY")
	if unsafe is not None and unsafe.strip().lower() in _TRUTHY:
		out = replace(out, trust_mode=TrustMode.PERMISSIVE)
	return out
