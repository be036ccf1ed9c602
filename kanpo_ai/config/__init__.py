"""Kanpo AI — 設定モジュール"""
from .settings import (
    KanpoConfig,
    get_default_config,
    resolve_environment,
    TEST_WEBHOOK_URL,
    PRODUCTION_WEBHOOK_URL,
    LOCAL_HOSTS,
    Environment,
    ConfigError,
    APIConfig,
    AppInfo,
    DataConfig,
    ValidationConfig,
    UIConfig,
    SessionConfig,
    StorageKeys,
    StorageConfig,
    DebugConfig,
)
from .catalog import SymptomTag, SYMPTOM_TAGS
from .messages import MessageCatalog
from .loader import save_config, load_config, save_yaml, load_yaml

__all__ = [
    "KanpoConfig",
    "get_default_config",
    "resolve_environment",
    "TEST_WEBHOOK_URL",
    "PRODUCTION_WEBHOOK_URL",
    "LOCAL_HOSTS",
    "Environment",
    "ConfigError",
    "APIConfig",
    "AppInfo",
    "DataConfig",
    "ValidationConfig",
    "UIConfig",
    "SessionConfig",
    "StorageKeys",
    "StorageConfig",
    "DebugConfig",
    "SymptomTag",
    "SYMPTOM_TAGS",
    "MessageCatalog",
    "save_config",
    "load_config",
    "save_yaml",
    "load_yaml",
]
