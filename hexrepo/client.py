# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Repository requests: URL and header construction around a transport.

The transport is any callable `fetch(method, url, headers) -> bytes` that
raises TransportError on failure. `urllib_fetch` is the default.
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.request
from typing import Callable, Mapping
from urllib.parse import quote

from hexrepo.config_v0 import HEXPM, RepositoryConfig, RepoSettings, resolve_repo
from hexrepo.errors import unknown_repository
from hexrepo.installs_v0 import INSTALLS_PATH, LATEST, UpgradeVerdict, resolve_upgrade
from hexrepo.verify import verify_registry

logger = logging.getLogger(__name__)

# RFC 3986 pchar minus unreserved (always safe): sub-delims, ":" and "@".
_SEGMENT_SAFE = "!$&'()*+,;=:@"


class TransportError(Exception):
	def __init__(self, url: str, message: str, status: int | None = None) -> None:
		super().__init__(f"{message} ({url})")
		self.url = url
		self.status = status


Fetch = Callable[[str, str, Mapping[str, str]], bytes]


def urllib_fetch(method: str, url: str, headers: Mapping[str, str], timeout: float = 15.0) -> bytes:
	req = urllib.request.Request(url, method=method.upper(), headers=dict(headers))
	try:
		with urllib.request.urlopen(req, timeout=timeout) as resp:
			return resp.read()
	except urllib.error.HTTPError as e:
		raise TransportError(url, f"HTTP {e.code}: {e.reason}", status=e.code) from e
	except (urllib.error.URLError, OSError) as e:
		raise TransportError(url, str(e)) from e


def _segment(value: str) -> str:
	return quote(value, safe=_SEGMENT_SAFE)


def package_url(repo: RepositoryConfig, package: str) -> str:
	return f"{repo.url}/packages/{_segment(package)}"


def docs_url(repo: RepositoryConfig, package: str, version: str) -> str:
	return f"{repo.url}/docs/{_segment(package)}-{_segment(version)}.tar.gz"


def tarball_url(repo: RepositoryConfig, package: str, version: str) -> str:
	return f"{repo.url}/tarballs/{_segment(package)}-{_segment(version)}.tar"


def installs_url(settings: RepoSettings) -> str:
	# The update check always talks to the canonical repository, not the mirror.
	config = settings.repos.get(HEXPM)
	if config is None:
		raise unknown_repository(HEXPM)
	return config.url + INSTALLS_PATH


def etag_headers(etag: str | None) -> dict[str, str]:
	if etag is None:
		return {}
	return {"if-none-match": etag}


def auth_headers(repo: RepositoryConfig) -> dict[str, str]:
	if repo.auth_key:
		return {"authorization": repo.auth_key}
	return {}


class RepoClient:
	def __init__(self, settings: RepoSettings, fetch: Fetch = urllib_fetch) -> None:
		self.settings = settings
		self._fetch = fetch

	def _get(self, url: str, headers: Mapping[str, str]) -> bytes:
		logger.debug("GET %s", url)
		return self._fetch("get", url, headers)

	def get_package(self, repo: str | None, package: str, etag: str | None = None) -> bytes:
		config = resolve_repo(self.settings, repo)
		return self._get(package_url(config, package), {**etag_headers(etag), **auth_headers(config)})

	def get_docs(self, repo: str | None, package: str, version: str) -> bytes:
		config = resolve_repo(self.settings, repo)
		return self._get(docs_url(config, package, version), auth_headers(config))

	def get_tarball(self, repo: str | None, package: str, version: str, etag: str | None = None) -> bytes:
		config = resolve_repo(self.settings, repo)
		return self._get(tarball_url(config, package, version), {**etag_headers(etag), **auth_headers(config)})

	def get_installs(self) -> bytes:
		return self._get(installs_url(self.settings), {})

	def fetch_registry(self, repo: str | None, package: str, etag: str | None = None) -> bytes:
		"""Fetch a package's registry file and return its verified payload."""
		body = self.get_package(repo, package, etag)
		return verify_registry(body, resolve_repo(self.settings, repo), self.settings.trust_mode)

	def check_for_update(self, runtime_version: str, current_version: str) -> UpgradeVerdict:
		"""
		Advisory update check. Transport failures yield LATEST.
		"""
		try:
			body = self.get_installs()
		except TransportError as err:
			logger.info("update check skipped: %s", err)
			return LATEST
		return resolve_upgrade(body, runtime_version, current_version)
