"""Console-script entrypoint; the implementation lives in `github_manager.manager.main`."""

from __future__ import annotations

from github_manager.manager.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
