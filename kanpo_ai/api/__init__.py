"""
Kanpo AI — サンドボックス Webhook

ローカル開発用の診断エンジン代替 (FastAPI)。
"""

from .config import SandboxConfig
from .suggestions import SuggestionEngine, Formula, FORMULAS

__all__ = [
    'SandboxConfig',
    'SuggestionEngine',
    'Formula',
    'FORMULAS',
]
