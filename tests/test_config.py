import pytest

from jcapi import STD_URL_BASE
from jcapi.config import resolve_settings


def test_flags_win(tmp_path):
    config = tmp_path / "jc.json"
    config.write_text('{"api_key": "file-key", "url": "https://file.example.com"}')
    assert resolve_settings("flag-key", "https://flag.example.com", str(config)) == ("flag-key", "https://flag.example.com")


def test_falls_back_to_config(tmp_path):
    config = tmp_path / "jc.json"
    config.write_text('{"api_key": "file-key"}')
    assert resolve_settings(None, None, str(config)) == ("file-key", STD_URL_BASE)


def test_missing_config(tmp_path):
    assert resolve_settings(None, None, str(tmp_path / "none.json")) == ("", STD_URL_BASE)


def test_config_must_be_object(tmp_path):
    config = tmp_path / "jc.json"
    config.write_text("[1, 2]")
    with pytest.raises(ValueError, match="JSON object"):
        resolve_settings(None, None, str(config))
