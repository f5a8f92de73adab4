# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Installs compatibility table (v0) and the update check built on it.

Format: one release per line, oldest first, comma-separated:

  <hex_version>,<digest>,<compatible_runtime_version>[,<compatible_runtime_version>...]

The update check is advisory. Malformed rows are skipped and missing data
yields LATEST, so a broken table never blocks normal operation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from hexrepo import semver

logger = logging.getLogger(__name__)

INSTALLS_PATH = "/installs/hex-1.x.csv"


@dataclass(frozen=True)
class CompatibilityRow:
	hex_version: str
	digest: str
	compatible_versions: tuple[str, ...]


@dataclass(frozen=True)
class UpgradeVerdict:
	kind: str  # "latest" | "newer"
	version: str | None = None

	@property
	def is_newer(self) -> bool:
		return self.kind == "newer"

	@classmethod
	def newer_available(cls, version: str) -> UpgradeVerdict:
		return cls(kind="newer", version=version)

	def to_dict(self) -> dict[str, object]:
		return {"kind": self.kind, "version": self.version}


LATEST = UpgradeVerdict(kind="latest")


def _split_fields(line: str) -> list[str]:
	fields = line.split(",")
	# Only trailing empty fields are dropped; interior ones keep their position.
	while fields and not fields[-1]:
		fields.pop()
	return fields


def parse_installs_csv(body: bytes | str) -> list[CompatibilityRow]:
	"""Parse the table in file order, skipping rows with fewer than two fields."""
	text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
	rows: list[CompatibilityRow] = []
	lines = [line for line in text.split("\n") if line]
	for lineno, line in enumerate(lines, start=1):
		fields = _split_fields(line.rstrip("\r"))
		if len(fields) < 2:
			logger.debug("installs csv: skipping line %d with %d field(s)", lineno, len(fields))
			continue
		rows.append(CompatibilityRow(hex_version=fields[0], digest=fields[1], compatible_versions=tuple(fields[2:])))
	return rows


def _supports_runtime(row: CompatibilityRow, runtime: semver.Version) -> bool:
	for raw in row.compatible_versions:
		try:
			if semver.compare(raw, runtime) <= 0:
				return True
		except ValueError:
			logger.debug("installs csv: ignoring unparseable runtime version %r for %s", raw, row.hex_version)
	return False


def find_eligible_version(rows: Sequence[CompatibilityRow], runtime_version: str | semver.Version) -> str | None:
	"""
	Return the newest release whose minimum runtime is satisfied.

	Scans from the last (newest) row backwards and stops at the first match.
	"""
	runtime = semver.parse(runtime_version)
	for i in range(len(rows) - 1, -1, -1):
		row = rows[i]
		try:
			semver.parse(row.hex_version)
		except ValueError:
			logger.debug("installs csv: skipping release with invalid version %r", row.hex_version)
			continue
		if _supports_runtime(row, runtime):
			return row.hex_version
	return None


def resolve_upgrade(
	csv_body: bytes | str,
	runtime_version: str | semver.Version,
	current_tool_version: str | semver.Version,
) -> UpgradeVerdict:
	runtime = semver.parse(runtime_version)
	current = semver.parse(current_tool_version)

	eligible = find_eligible_version(parse_installs_csv(csv_body), runtime)
	# Treat missing as latest.
	if eligible is None:
		return LATEST
	if semver.compare(eligible, current) > 0:
		return UpgradeVerdict.newer_available(eligible)
	return LATEST
