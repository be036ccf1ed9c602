"""
Kanpo AI — サンドボックスの依存オブジェクト

SuggestionEngine はプロセスに一つ。
"""

from .config import config, SandboxConfig
from .suggestions import SuggestionEngine

suggestion_engine = SuggestionEngine(
    max_sessions=config.max_sessions,
    session_timeout_minutes=config.session_timeout_minutes,
)


def get_engine() -> SuggestionEngine:
    return suggestion_engine


def get_config() -> SandboxConfig:
    return config
