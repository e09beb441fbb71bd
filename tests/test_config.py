from __future__ import annotations

from pathlib import Path

import pytest

from sea_router.core import config as config_module
from sea_router.core.config import (
    CONFIG_ENV_VAR,
    SeaRouterConfig,
    get_config,
    project_root,
    reload_config,
    resolve_source,
)


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, "_config", None)
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


def test_partial_yaml_keeps_defaults(tmp_path: Path) -> None:
    path = tmp_path / "router.yaml"
    path.write_text("snap:\n  max_radius_cells: 7\nsearch:\n  geographic_costs: true\n")

    cfg = SeaRouterConfig.from_yaml(path)

    assert cfg.snap.max_radius_cells == 7
    assert cfg.search.geographic_costs is True
    assert cfg.search.max_iterations == 500_000
    assert cfg.simplify.enabled is True
    assert cfg.grid.global_source == "data/processed/water-grid.bin"


def test_empty_yaml_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert SeaRouterConfig.from_yaml(path) == SeaRouterConfig()


def test_unknown_key_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("snap:\n  radius: 3\n")
    with pytest.raises(TypeError):
        SeaRouterConfig.from_yaml(path)


def test_get_config_reads_env_var(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "router.yaml"
    path.write_text("simplify:\n  enabled: false\n")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

    cfg = get_config()

    assert cfg.simplify.enabled is False
    assert get_config() is cfg


def test_missing_config_file_falls_back_to_defaults(tmp_path: Path) -> None:
    assert get_config(tmp_path / "nope.yaml") == SeaRouterConfig()


def test_reload_config_rereads_file(tmp_path: Path) -> None:
    path = tmp_path / "router.yaml"
    path.write_text("snap:\n  max_radius_cells: 3\n")
    assert get_config(path).snap.max_radius_cells == 3

    path.write_text("snap:\n  max_radius_cells: 9\n")
    assert reload_config(path).snap.max_radius_cells == 9


def test_resolve_source() -> None:
    assert resolve_source("https://example.com/grid.bin") == "https://example.com/grid.bin"
    assert resolve_source("/abs/grid.bin") == "/abs/grid.bin"
    assert resolve_source("data/grid.bin") == str(project_root() / "data" / "grid.bin")
