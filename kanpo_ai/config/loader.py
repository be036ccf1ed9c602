"""Kanpo AI — 設定の読み込み・保存 (YAML)"""
import yaml
from pathlib import Path

from .settings import ConfigError, KanpoConfig


def save_yaml(config: KanpoConfig, path: str) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, allow_unicode=True)


def load_yaml(path: str) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e


def save_config(config: KanpoConfig, path: str) -> None:
    save_yaml(config, path)


def load_config(path: str) -> KanpoConfig:
    return KanpoConfig.from_dict(load_yaml(path))
