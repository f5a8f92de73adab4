# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Semantic version parsing and precedence (semver 2.0).

Accepted form: MAJOR.MINOR.PATCH[-PRE][+BUILD]. The two-part shorthand
MAJOR.MINOR is read as MAJOR.MINOR.0. Build metadata never affects ordering.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering

_VERSION_RE = re.compile(
	r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)(?:\.(?P<patch>0|[1-9]\d*))?"
	r"(?:-(?P<pre>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
	r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


def _cmp(a: object, b: object) -> int:
	return (a > b) - (a < b)  # type: ignore[operator]


def _compare_pre(a: tuple[str, ...], b: tuple[str, ...]) -> int:
	# A release (no pre-release identifiers) outranks any of its pre-releases.
	if not a or not b:
		return _cmp(not a, not b)
	for x, y in zip(a, b):
		if x == y:
			continue
		xn, yn = x.isdigit(), y.isdigit()
		if xn and yn:
			return _cmp(int(x), int(y))
		if xn != yn:
			return -1 if xn else 1
		return _cmp(x, y)
	return _cmp(len(a), len(b))


@total_ordering
@dataclass(frozen=True)
class Version:
	major: int
	minor: int
	patch: int
	pre: tuple[str, ...] = ()
	build: tuple[str, ...] = field(default=(), compare=False)

	@classmethod
	def parse(cls, text: str) -> Version:
		m = _VERSION_RE.match(text.strip())
		if m is None:
			raise ValueError(f"invalid version: {text!r}")
		pre = tuple(m.group("pre").split(".")) if m.group("pre") else ()
		build = tuple(m.group("build").split(".")) if m.group("build") else ()
		return cls(
			major=int(m.group("major")),
			minor=int(m.group("minor")),
			patch=int(m.group("patch") or 0),
			pre=pre,
			build=build,
		)

	def compare(self, other: Version) -> int:
		core = _cmp((self.major, self.minor, self.patch), (other.major, other.minor, other.patch))
		if core:
			return core
		return _compare_pre(self.pre, other.pre)

	def __lt__(self, other: object) -> bool:
		if not isinstance(other, Version):
			return NotImplemented
		return self.compare(other) < 0

	def __eq__(self, other: object) -> bool:
		if not isinstance(other, Version):
			return NotImplemented
		return self.compare(other) == 0

	def __hash__(self) -> int:
		return hash((self.major, self.minor, self.patch, self.pre))

	def __str__(self) -> str:
		out = f"{self.major}.{self.minor}.{self.patch}"
		if self.pre:
			out += "-" + ".".join(self.pre)
		if self.build:
			out += "+" + ".".join(self.build)
		return out


def parse(text: str | Version) -> Version:
	return text if isinstance(text, Version) else Version.parse(text)


def compare(a: str | Version, b: str | Version) -> int:
	"""Return -1, 0 or 1 as `a` is lower than, equal to, or greater than `b`."""
	return parse(a).compare(parse(b))
