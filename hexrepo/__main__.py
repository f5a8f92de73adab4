# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from hexrepo.cli import main

if __name__ == "__main__":
	raise SystemExit(main())
