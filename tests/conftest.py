"""Pytest configuration for the compat_executor test suite.

Puts the repository root on ``sys.path`` so ``compat_executor`` imports
without an editable install.
"""
from __future__ import annotations

import sys
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def pytest_sessionstart(session):  # type: ignore[override]
    if str(_PROJECT_ROOT) not in sys.path:
        sys.path.insert(0, str(_PROJECT_ROOT))
