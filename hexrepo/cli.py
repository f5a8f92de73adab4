# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from hexrepo.config_v0 import RepoSettings, default_settings, load_settings_json, resolve_repo, settings_from_env
from hexrepo.crypto import sha256_hex
from hexrepo.errors import RegistryError
from hexrepo.installs_v0 import resolve_upgrade
from hexrepo.verify import verify_registry


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="hexrepo", description="Repository trust checks (registry verification, update check)")
	p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
	sub = p.add_subparsers(dest="cmd", required=True)

	repo = sub.add_parser("repo", help="Show the resolved configuration of a repository")
	repo.add_argument("name", nargs="?", default=None, help="Repository name (default: hexpm)")
	repo.add_argument("--config", type=Path, default=None, help="Path to hexrepo config JSON")
	repo.add_argument("--json", action="store_true", help="Emit machine-readable JSON")

	verify = sub.add_parser("verify", help="Verify a signed registry file against the repository public key")
	verify.add_argument("file", type=Path, help="Path to the fetched registry file")
	verify.add_argument("--repo", type=str, default=None, help="Repository name (default: hexpm)")
	verify.add_argument("--config", type=Path, default=None, help="Path to hexrepo config JSON")
	verify.add_argument("--out", type=Path, default=None, help="Write the verified payload to this path")
	verify.add_argument("--json", action="store_true", help="Emit machine-readable JSON")

	check = sub.add_parser("check-update", help="Decide whether a newer client release exists for this runtime")
	check.add_argument("csv", type=Path, help="Path to the installs CSV")
	check.add_argument("--runtime-version", type=str, required=True, help="Runtime version in use")
	check.add_argument("--current-version", type=str, required=True, help="Current client version")
	check.add_argument("--json", action="store_true", help="Emit machine-readable JSON")
	return p


def _load_settings(config_path: Path | None) -> RepoSettings:
	if config_path is None:
		base = default_settings()
	else:
		try:
			base = load_settings_json(config_path)
		except (OSError, ValueError) as err:
			raise RegistryError(reason_code="CONFIG_INVALID", message=str(err)) from err
	return settings_from_env(base)


def _emit(obj: dict[str, Any], *, as_json: bool) -> None:
	if as_json:
		print(json.dumps(obj, sort_keys=True, separators=(",", ":")))
	else:
		print(json.dumps(obj, indent=2, sort_keys=True))


def _run(args: argparse.Namespace) -> int:
	if args.cmd == "repo":
		settings = _load_settings(args.config)
		config = resolve_repo(settings, args.name)
		_emit({**config.to_dict(), "trust_mode": settings.trust_mode.value}, as_json=args.json)
		return 0

	if args.cmd == "verify":
		settings = _load_settings(args.config)
		config = resolve_repo(settings, args.repo)
		payload = verify_registry(args.file.read_bytes(), config, settings.trust_mode)
		if args.out is not None:
			args.out.write_bytes(payload)
		_emit(
			{
				"ok": True,
				"repo": config.name,
				"trust_mode": settings.trust_mode.value,
				"payload_sha256": f"sha256:{sha256_hex(payload)}",
				"payload_size": len(payload),
			},
			as_json=args.json,
		)
		return 0

	if args.cmd == "check-update":
		verdict = resolve_upgrade(args.csv.read_bytes(), args.runtime_version, args.current_version)
		if args.json:
			_emit(verdict.to_dict(), as_json=True)
		elif verdict.is_newer:
			print(f"A new version {verdict.version} is available (current: {args.current_version})")
		else:
			print("up to date")
		return 0

	raise AssertionError("unreachable")


def main(argv: list[str] | None = None) -> int:
	p = _build_parser()
	args = p.parse_args(argv)
	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s: %(message)s")

	try:
		return _run(args)
	except RegistryError as err:
		if getattr(args, "json", False):
			print(json.dumps({"ok": False, "error": err.to_dict()}, sort_keys=True, separators=(",", ":")))
		else:
			print(err.format_human(), file=sys.stderr)
		return 2
	except (OSError, ValueError) as err:
		p.error(str(err))
		return 2
