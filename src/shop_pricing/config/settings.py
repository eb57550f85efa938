"""
Centralized settings and path configuration for the pricing engine.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


def _env_path(name: str, default: Path) -> Path:
    value = os.environ.get(name, "").strip()
    return Path(value) if value else default


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Snapshot files
    default_prices: Path
    clients: Path

    # Chilean IVA
    tax_pct: float = 19

    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()
        data_dir = Path(__file__).resolve().parent.parent / 'data'

        tax_raw = os.environ.get('SHOP_PRICING_TAX_PCT', '').strip()
        tax_pct = float(tax_raw) if tax_raw else 19
        if tax_pct < 0:
            raise ValueError(f"SHOP_PRICING_TAX_PCT cannot be negative: {tax_raw}")

        return cls(
            project_root=root,
            default_prices=_env_path('SHOP_PRICING_DEFAULT_PRICES', data_dir / 'default_prices.csv'),
            clients=_env_path('SHOP_PRICING_CLIENTS', data_dir / 'clients.json'),
            tax_pct=tax_pct,
            log_level=os.environ.get('SHOP_PRICING_LOG_LEVEL', 'INFO').strip().upper() or 'INFO',
            log_json=os.environ.get('SHOP_PRICING_LOG_JSON', '').strip().lower() in ('1', 'true', 'yes'),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reset_settings():
    """Forget the cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None
