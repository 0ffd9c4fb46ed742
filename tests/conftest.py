"""Pytest configuration for the preferences test suites.

Puts the project root on sys.path so both `prefs_lib` and the shared
`tests.helpers` fakes import without an installed package.
"""
import sys
from pathlib import Path


def pytest_configure(config):
    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))
