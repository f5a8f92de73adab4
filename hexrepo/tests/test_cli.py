# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from hexrepo.cli import main
from hexrepo.crypto import sha256_hex, sign_payload
from hexrepo.signed_v0 import encode_signed


def _write_config(path: Path, public_pem: bytes | None) -> Path:
	repo: dict[str, str] = {"url": "https://repo.hex.pm"}
	if public_pem is not None:
		repo["public_key"] = public_pem.decode("ascii")
	obj = {"format": "hexrepo-config", "version": 0, "repos": {"hexpm": repo}}
	path.write_text(json.dumps(obj, sort_keys=True) + "\n", encoding="utf-8")
	return path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
	monkeypatch.delenv("HEX_MIRROR", raising=False)
	monkeypatch.delenv("HEX_UNSAFE_REGISTRY", raising=False)


def test_verify_ok(tmp_path: Path, rsa_private_pem: bytes, rsa_public_pem: bytes, capsys) -> None:
	config = _write_config(tmp_path / "hexrepo.json", rsa_public_pem)
	body = tmp_path / "plug"
	body.write_bytes(encode_signed(b"payload", sign_payload(rsa_private_pem, b"payload")))
	out = tmp_path / "plug.payload"

	code = main(["verify", str(body), "--config", str(config), "--out", str(out), "--json"])
	assert code == 0
	report = json.loads(capsys.readouterr().out)
	assert report == {
		"ok": True,
		"repo": "hexpm",
		"trust_mode": "strict",
		"payload_sha256": f"sha256:{sha256_hex(b'payload')}",
		"payload_size": 7,
	}
	assert out.read_bytes() == b"payload"


def test_verify_tampered_exits_2(tmp_path: Path, rsa_private_pem: bytes, rsa_public_pem: bytes, capsys) -> None:
	config = _write_config(tmp_path / "hexrepo.json", rsa_public_pem)
	body = tmp_path / "plug"
	body.write_bytes(encode_signed(b"evil", sign_payload(rsa_private_pem, b"payload")))

	assert main(["verify", str(body), "--config", str(config)]) == 2
	assert "[REGISTRY_UNVERIFIED]" in capsys.readouterr().err


def test_verify_missing_key_json(tmp_path: Path, rsa_private_pem: bytes, capsys) -> None:
	config = _write_config(tmp_path / "hexrepo.json", None)
	body = tmp_path / "plug"
	body.write_bytes(encode_signed(b"payload", sign_payload(rsa_private_pem, b"payload")))

	assert main(["verify", str(body), "--config", str(config), "--json"]) == 2
	report = json.loads(capsys.readouterr().out)
	assert report["ok"] is False
	assert report["error"]["reason_code"] == "PUBLIC_KEY_MISSING"


def test_verify_unsafe_env_skips_check(tmp_path: Path, rsa_private_pem: bytes, monkeypatch, capsys) -> None:
	config = _write_config(tmp_path / "hexrepo.json", None)
	body = tmp_path / "plug"
	body.write_bytes(encode_signed(b"payload", sign_payload(rsa_private_pem, b"payload")))
	monkeypatch.setenv("HEX_UNSAFE_REGISTRY", "1")

	assert main(["verify", str(body), "--config", str(config), "--json"]) == 0
	assert json.loads(capsys.readouterr().out)["trust_mode"] == "permissive"


def test_repo_unknown_organization(capsys) -> None:
	assert main(["repo", "hexpm:acme"]) == 2
	err = capsys.readouterr().err
	assert "[ORGANIZATION_UNKNOWN]" in err
	assert "organization=acme" in err


def test_repo_mirror_from_env(monkeypatch, capsys) -> None:
	monkeypatch.setenv("HEX_MIRROR", "https://mirror.example")
	assert main(["repo", "--json"]) == 0
	assert json.loads(capsys.readouterr().out)["url"] == "https://mirror.example"


def test_invalid_config(tmp_path: Path, capsys) -> None:
	path = tmp_path / "bad.json"
	path.write_text('{"format": "other"}', encoding="utf-8")
	assert main(["repo", "--config", str(path)]) == 2
	assert "[CONFIG_INVALID]" in capsys.readouterr().err


def test_check_update(tmp_path: Path, capsys) -> None:
	csv = tmp_path / "hex-1.x.csv"
	csv.write_bytes(b"0.1.0,digest1,1.0.0\n0.2.0,digest2,1.2.0\n0.3.0,digest3,2.0.0")

	assert main(["check-update", str(csv), "--runtime-version", "1.3.0", "--current-version", "0.1.5", "--json"]) == 0
	assert json.loads(capsys.readouterr().out) == {"kind": "newer", "version": "0.2.0"}

	assert main(["check-update", str(csv), "--runtime-version", "1.3.0", "--current-version", "0.2.0"]) == 0
	assert capsys.readouterr().out.strip() == "up to date"


def test_module_entrypoint(tmp_path: Path) -> None:
	csv = tmp_path / "hex-1.x.csv"
	csv.write_bytes(b"")
	repo_root = Path(__file__).resolve().parents[2]
	env = {k: v for k, v in os.environ.items() if k not in ("HEX_MIRROR", "HEX_UNSAFE_REGISTRY")}
	res = subprocess.run(
		[sys.executable, "-m", "hexrepo", "check-update", str(csv), "--runtime-version", "1.0.0", "--current-version", "0.1.0"],
		cwd=str(repo_root),
		env=env,
		check=False,
		capture_output=True,
		text=True,
	)
	assert res.returncode == 0, res.stderr
	assert res.stdout.strip() == "up to date"
