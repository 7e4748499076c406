from pathlib import Path

import pytest

from backend.src.services import config as config_module


@pytest.fixture(autouse=True)
def restore_config_cache():
    """
    Ensure configuration cache is cleared between tests.
    """
    config_module.reload_config()
    yield
    config_module.reload_config()


def test_get_config_defaults(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("VAULT_BASE_PATH", str(tmp_path))
    for key in ("OPENROUTER_API_KEY", "CANVAS_WIDTH", "CANVAS_HEIGHT", "DEFAULT_USER_ID"):
        monkeypatch.delenv(key, raising=False)

    cfg = config_module.reload_config()

    assert cfg.vault_base_path == tmp_path.resolve()
    assert cfg.llm_api_key is None
    assert cfg.default_user_id == "demo-user"
    assert (cfg.canvas_width, cfg.canvas_height) == (1200.0, 900.0)


def test_blank_api_key_is_treated_as_missing(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("VAULT_BASE_PATH", str(tmp_path))
    monkeypatch.setenv("OPENROUTER_API_KEY", "   ")

    cfg = config_module.reload_config()

    assert cfg.llm_api_key is None


def test_canvas_size_flows_into_layout_settings(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("VAULT_BASE_PATH", str(tmp_path))
    monkeypatch.setenv("CANVAS_WIDTH", "800")
    monkeypatch.setenv("CANVAS_HEIGHT", "600")

    settings = config_module.reload_config().layout_settings()

    assert settings.canvas_width == 800.0
    assert settings.canvas_height == 600.0
    assert settings.overview_iterations == 40
    assert settings.expanded_iterations == 50


def test_get_config_rejects_non_positive_canvas(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("VAULT_BASE_PATH", str(tmp_path))
    monkeypatch.setenv("CANVAS_WIDTH", "0")

    with pytest.raises(ValueError):
        config_module.reload_config()


def test_local_mode_flag_parsing(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("VAULT_BASE_PATH", str(tmp_path))
    monkeypatch.setenv("ENABLE_LOCAL_MODE", "false")

    cfg = config_module.reload_config()

    assert cfg.enable_local_mode is False
