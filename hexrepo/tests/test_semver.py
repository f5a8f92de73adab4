# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from hexrepo.semver import Version, compare

# Ascending semver 2.0 precedence.
ORDERED = [
	"1.0.0-alpha",
	"1.0.0-alpha.1",
	"1.0.0-alpha.beta",
	"1.0.0-beta",
	"1.0.0-beta.2",
	"1.0.0-beta.11",
	"1.0.0-rc.1",
	"1.0.0",
	"1.0.1",
	"1.2.0",
	"1.10.0",
	"2.0.0",
]


def test_precedence_is_total_and_ordered() -> None:
	for i, a in enumerate(ORDERED):
		for j, b in enumerate(ORDERED):
			expected = (i > j) - (i < j)
			assert compare(a, b) == expected, (a, b)


def test_build_metadata_is_ignored() -> None:
	assert compare("1.0.0+build.1", "1.0.0+build.2") == 0
	assert Version.parse("1.0.0+abc") == Version.parse("1.0.0")
	assert str(Version.parse("1.0.0-rc.1+abc")) == "1.0.0-rc.1+abc"


def test_two_part_shorthand() -> None:
	assert Version.parse("1.15") == Version.parse("1.15.0")


def test_rich_comparison() -> None:
	assert Version.parse("1.2.3") < Version.parse("1.2.4")
	assert Version.parse("2.0.0") >= Version.parse("2.0.0-rc.0")
	assert sorted(Version.parse(v) for v in reversed(ORDERED)) == [Version.parse(v) for v in ORDERED]


@pytest.mark.parametrize("text", ["", "1", "a.b.c", "1.2.3.4", "01.2.3", "1.2.3-", "1.2.3+", "v1.2.3"])
def test_invalid_versions(text: str) -> None:
	with pytest.raises(ValueError):
		Version.parse(text)
