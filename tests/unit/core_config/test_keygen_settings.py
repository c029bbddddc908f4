import pytest
from pydantic import ValidationError

from core_config import get_settings
from core_config.constants import MANIFEST_FILENAME, MAX_LOG_LIFETIME, BYTE_DERIVED_AFFIX_LEN


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)  # no stray .env
    s = get_settings()
    assert s.export_format == "both"
    assert s.create_manifest is True
    assert s.new_format is False
    assert s.manifest_name == MANIFEST_FILENAME == "validator-keys-manifest.yaml"
    assert s.keygen_scheme == "keygen.scheme:LeanSpecScheme"


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("KEYGEN_EXPORT_FORMAT", "SSZ")
    monkeypatch.setenv("KEYGEN_CREATE_MANIFEST", "false")
    monkeypatch.setenv("KEYGEN_NEW_FORMAT", "1")
    s = get_settings()
    assert s.export_format == "ssz"
    assert s.create_manifest is False
    assert s.new_format is True


def test_env_file_is_read(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text("KEYGEN_SCHEME=pkg.mod:Scheme\n", encoding="utf-8")
    assert get_settings().keygen_scheme == "pkg.mod:Scheme"


@pytest.mark.parametrize("bad", ["json", ""])
def test_rejects_unknown_format(monkeypatch, tmp_path, bad):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("KEYGEN_EXPORT_FORMAT", bad)
    with pytest.raises(ValidationError):
        get_settings()


def test_manifest_name_must_be_plain(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("KEYGEN_MANIFEST_NAME", "../escape.yaml")
    with pytest.raises(ValidationError):
        get_settings()


def test_constants():
    assert MAX_LOG_LIFETIME == 32
    assert BYTE_DERIVED_AFFIX_LEN == 3


def test_log_level_is_normalised(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SERVICE_LOG_LEVEL", "warning")
    assert get_settings().service_log_level == "WARNING"


def test_unknown_log_level_rejected(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SERVICE_LOG_LEVEL", "chatty")
    with pytest.raises(ValidationError):
        get_settings()
