"""Configuration loader and dataclasses for sea router settings."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import yaml


CONFIG_ENV_VAR = "SEA_ROUTER_CONFIG"


@dataclass
class GridConfig:
    """Where the water/land masks come from (file paths or http(s) URLs).

    Relative paths are resolved against the project root.
    """
    global_source: str = "data/processed/water-grid.bin"
    regional_source: Optional[str] = "data/processed/water-grid-regional.bin"
    request_timeout_s: float = 30.0


@dataclass
class SnapConfig:
    """Ring search settings."""
    max_radius_cells: int = 50


@dataclass
class SearchConfig:
    """A* settings."""
    max_iterations: int = 500_000
    geographic_costs: bool = False
    prefilter_components: bool = True
    time_budget_s: Optional[float] = None


@dataclass
class SimplifyConfig:
    """Path simplification configuration."""
    enabled: bool = True
    tolerance_cells: float = 1.5


@dataclass
class SeaRouterConfig:
    """Complete router configuration."""
    grid: GridConfig = field(default_factory=GridConfig)
    snap: SnapConfig = field(default_factory=SnapConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    simplify: SimplifyConfig = field(default_factory=SimplifyConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "SeaRouterConfig":
        """Load configuration from a YAML file."""
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}

        return cls(
            grid=GridConfig(**data.get('grid', {})),
            snap=SnapConfig(**data.get('snap', {})),
            search=SearchConfig(**data.get('search', {})),
            simplify=SimplifyConfig(**data.get('simplify', {})),
        )


def project_root() -> Path:
    """Get project root (3 levels up from the package directory)."""
    return Path(__file__).resolve().parents[3]


def resolve_source(source: str) -> str:
    """Make relative file sources absolute; URLs pass through untouched."""
    if source.startswith(("http://", "https://")):
        return source
    path = Path(source)
    if not path.is_absolute():
        path = project_root() / path
    return str(path)


# Global config instance - lazily loaded
_config: Optional[SeaRouterConfig] = None


def get_config(config_path: Optional[Path] = None) -> SeaRouterConfig:
    """Get the global configuration, loading from file if not already loaded.

    Args:
        config_path: Path to the config file. If None, uses ``$SEA_ROUTER_CONFIG``
            or ``configs/sea_router.yaml`` under the project root.

    Returns:
        The SeaRouterConfig instance.
    """
    global _config

    if _config is None or config_path is not None:
        if config_path is None:
            env_path = os.environ.get(CONFIG_ENV_VAR)
            config_path = Path(env_path) if env_path else project_root() / "configs" / "sea_router.yaml"

        if config_path.exists():
            _config = SeaRouterConfig.from_yaml(config_path)
        else:
            # Use defaults if config file not found
            _config = SeaRouterConfig()

    return _config


def reload_config(config_path: Optional[Path] = None) -> SeaRouterConfig:
    """Force reload of configuration from file."""
    global _config
    _config = None
    return get_config(config_path)
