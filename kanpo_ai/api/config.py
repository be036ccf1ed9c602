"""
Kanpo AI — サンドボックス Webhook の設定

ローカル開発用の診断エンジン代替サーバー (FastAPI)。
"""

import os
from dataclasses import dataclass, field

from kanpo_ai.config import ConfigError


@dataclass
class SandboxConfig:
    """サンドボックスサーバーの設定"""

    # サーバー
    host: str = "127.0.0.1"
    port: int = 5678
    debug: bool = True
    reload: bool = False

    # CORS (ブラウザのフォームから直接呼べるように)
    cors_origins: list = field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = False
    cors_allow_methods: list = field(default_factory=lambda: ["GET", "POST", "OPTIONS"])
    cors_allow_headers: list = field(default_factory=lambda: ["*"])

    # 応答の遅延 (タイムアウト表示の確認用)
    latency_ms: int = 0

    # セッション
    max_sessions: int = 1000
    session_timeout_minutes: int = 60

    api_title: str = "Kanpo AI Sandbox Webhook"
    api_description: str = "漢方AI診断支援システムのローカル開発用 Webhook"

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def diagnosis_url(self) -> str:
        return f"{self.base_url}/webhook/diagnosis"

    @property
    def followup_url(self) -> str:
        return f"{self.base_url}/webhook/followup"

    @classmethod
    def from_env(cls) -> "SandboxConfig":
        """環境変数から設定を作成"""
        try:
            return cls(
                host=os.getenv("KANPO_SANDBOX_HOST", "127.0.0.1"),
                port=int(os.getenv("KANPO_SANDBOX_PORT", "5678")),
                debug=os.getenv("KANPO_SANDBOX_DEBUG", "true").lower() == "true",
                latency_ms=int(os.getenv("KANPO_SANDBOX_LATENCY_MS", "0")),
            )
        except ValueError as e:
            raise ConfigError(f"Invalid sandbox setting: {e}") from e


# グローバル設定
config = SandboxConfig.from_env()
