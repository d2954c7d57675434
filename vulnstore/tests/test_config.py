"""
Tests for runner configuration loading.
"""
from pathlib import Path

import pytest

from vulnstore.config import load_config
from vulnstore.models import Vendor


def write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return str(path)


def test_load_full_config(tmp_path):
    path = write_config(tmp_path, """
store:
  url: redis://localhost:6379/0
  expire_seconds: 86400
  socket_timeout: 30
sources:
  debian:
    path: data/debian.json
  microsoft:
    path: data/msrc.json
report_dir: reports
""")

    config = load_config(path)

    assert config.store.url == "redis://localhost:6379/0"
    assert config.store.expire_seconds == 86400
    assert config.store.socket_timeout == 30
    assert config.sources == {
        Vendor.DEBIAN: {"path": "data/debian.json"},
        Vendor.MICROSOFT: {"path": "data/msrc.json"},
    }
    assert config.report_dir == Path("reports")


def test_defaults(tmp_path):
    config = load_config(write_config(tmp_path, "store:\n  url: redis://localhost\n"))

    assert config.store.expire_seconds == 0
    assert config.store.socket_timeout is None
    assert config.sources == {}
    assert config.report_dir == Path("output")


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "absent.yaml"))


@pytest.mark.parametrize("text, message", [
    ("sources: {}\n", "store.url"),
    ("store:\n  expire_seconds: 5\n", "store.url"),
    ("- a\n- b\n", "mapping"),
    ("store:\n  url: redis://x\n  expire_seconds: -1\n", "expire_seconds"),
    ("store:\n  url: redis://x\n  expire_seconds: true\n", "expire_seconds"),
    ("store:\n  url: redis://x\n  expire_seconds: soon\n", "expire_seconds"),
    ("store:\n  url: redis://x\nsources:\n  alpine: {}\n", "sources.alpine"),
])
def test_invalid_config(tmp_path, text, message):
    with pytest.raises(ValueError, match=message):
        load_config(write_config(tmp_path, text))
