import pytest

from scriptform.infra.kv_store import InMemoryKeyValueStore, JsonFileKeyValueStore
from scriptform.services.form_config import build_form_config_store
from scriptform.settings import PROJECT_ROOT, Settings


@pytest.mark.unit
def test_settings_defaults_under_unit_env(monkeypatch) -> None:
    monkeypatch.delenv("LOG_FORMAT", raising=False)

    settings = Settings.load()

    assert settings.is_testing is True
    assert settings.form_config_backend == "memory"
    assert settings.form_config_storage_key == "script_form_config"
    assert settings.form_config_dir == PROJECT_ROOT / "userdata" / "form_config"
    assert settings.log_format == "json"


@pytest.mark.unit
def test_settings_normalizes_case(monkeypatch) -> None:
    monkeypatch.setenv("FORM_CONFIG_BACKEND", " FILE ")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("LOG_FORMAT", "Console")

    settings = Settings.load()

    assert settings.form_config_backend == "file"
    assert settings.log_level == "DEBUG"
    assert settings.log_format == "console"


@pytest.mark.unit
def test_settings_rejects_unknown_backend(monkeypatch) -> None:
    monkeypatch.setenv("FORM_CONFIG_BACKEND", "redis")

    with pytest.raises(ValueError, match="FORM_CONFIG_BACKEND"):
        Settings.load()


@pytest.mark.unit
def test_settings_rejects_unknown_log_format(monkeypatch) -> None:
    monkeypatch.setenv("LOG_FORMAT", "xml")

    with pytest.raises(ValueError, match="LOG_FORMAT"):
        Settings.load()


@pytest.mark.unit
def test_settings_keeps_absolute_form_config_dir(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("FORM_CONFIG_DIR", str(tmp_path))

    assert Settings.load().form_config_dir == tmp_path


@pytest.mark.unit
def test_build_form_config_store_uses_memory_backend() -> None:
    store = build_form_config_store(Settings.load())

    assert isinstance(store.backend, InMemoryKeyValueStore)


@pytest.mark.unit
def test_build_form_config_store_uses_file_backend(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("FORM_CONFIG_BACKEND", "file")
    monkeypatch.setenv("FORM_CONFIG_DIR", str(tmp_path))
    monkeypatch.setenv("FORM_CONFIG_STORAGE_KEY", "custom_key")

    store = build_form_config_store(Settings.load())

    assert isinstance(store.backend, JsonFileKeyValueStore)
    assert store.backend.directory == tmp_path
    assert store.storage_key == "custom_key"


@pytest.mark.unit
@pytest.mark.parametrize("key", ["a/b", "../config", "key with space"])
def test_settings_rejects_storage_key_unsafe_for_file_backend(monkeypatch, key: str) -> None:
    monkeypatch.setenv("FORM_CONFIG_STORAGE_KEY", key)

    with pytest.raises(ValueError, match="FORM_CONFIG_STORAGE_KEY"):
        Settings.load()


@pytest.mark.unit
def test_flask_config_uses_restx_prefixed_404_help() -> None:
    config = Settings.load().to_flask_config()

    assert config["RESTX_ERROR_404_HELP"] is False
    assert "ERROR_404_HELP" not in config
