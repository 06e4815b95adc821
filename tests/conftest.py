"""Pytest configuration shared by the unit and backend tests.

Puts the project root on sys.path so the package imports without an
install, and keeps a developer's local datastore config out of the tests.
"""
import sys
from pathlib import Path

import pytest


def pytest_configure(config):
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))


@pytest.fixture(autouse=True)
def _isolated_datastore_config(monkeypatch, tmp_path):
    monkeypatch.setenv('DATASTORE_CONFIG', str(tmp_path / 'no-such-config.yml'))
