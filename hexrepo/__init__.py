# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
hexrepo: the trust boundary between a package client and its repositories.

Modules:
  config_v0    repository configuration and name resolution
  signed_v0    signed registry envelope codec
  crypto       public key loading and signature checks
  verify       registry payload verification (strict / permissive)
  semver       semantic version precedence
  installs_v0  installs compatibility table and update verdict
  client       URL/header construction around a transport
"""

__all__ = ["client", "config_v0", "crypto", "errors", "installs_v0", "semver", "signed_v0", "verify"]
