"""
Kanpo AI — システム設定

全パラメータを dataclass にまとめる:
- 型付けとデフォルト値
- config.api.request_timeout_ms のようなアクセス
- YAML へのシリアライズ (loader.py)

環境 (local / staging / production) はホスト名から一度だけ決定する。
"""

import os
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .catalog import SYMPTOM_TAGS, SymptomTag
from .messages import MessageCatalog


class ConfigError(ValueError):
    """設定ファイル・環境変数の不正"""


# =============================================================================
# ENUMS
# =============================================================================

class Environment(str, Enum):
    """実行環境"""
    LOCAL = "local"
    STAGING = "staging"
    PRODUCTION = "production"


LOCAL_HOSTS = ("localhost", "127.0.0.1")

TEST_WEBHOOK_URL = "https://x-harumi-office.app.n8n.cloud/webhook-test/cd96acc0-ccfd-44fd-bf7c-27db3f87a203"
PRODUCTION_WEBHOOK_URL = "https://x-harumi-office.app.n8n.cloud/webhook/cd96acc0-ccfd-44fd-bf7c-27db3f87a203"


def resolve_environment(hostname: Optional[str]) -> Environment:
    """ホスト名 → 実行環境"""
    host = (hostname or "").strip().lower()
    # "host:port" を許容
    if host.count(":") == 1:
        host = host.split(":", 1)[0]

    if host in LOCAL_HOSTS:
        return Environment.LOCAL
    if "staging" in host:
        return Environment.STAGING
    return Environment.PRODUCTION


# =============================================================================
# SECTIONS
# =============================================================================

@dataclass
class APIConfig:
    """診断Webhookの接続設定"""

    diagnosis_url: str = PRODUCTION_WEBHOOK_URL
    # None → diagnosis_url を使う
    followup_url: Optional[str] = None

    # 接続 + 応答待ちの合計がこの時間を超えない
    request_timeout_ms: int = 90000
    connect_timeout_ms: int = 10000

    # リトライ (NETWORK / SERVER のみ)
    max_retries: int = 3
    retry_delay_ms: int = 1000

    headers: Dict[str, str] = field(default_factory=lambda: {
        "Content-Type": "application/json",
        "Accept": "application/json",
    })

    @property
    def effective_followup_url(self) -> str:
        return self.followup_url or self.diagnosis_url

    @property
    def timeout_seconds(self) -> float:
        return self.request_timeout_ms / 1000.0

    @property
    def timeouts(self) -> Tuple[float, float]:
        """requests に渡す (connect, read)。合計は request_timeout_ms"""
        connect_ms = min(self.connect_timeout_ms, self.request_timeout_ms // 2)
        read_ms = self.request_timeout_ms - connect_ms
        return connect_ms / 1000.0, read_ms / 1000.0


@dataclass
class AppInfo:
    """アプリ情報"""
    name: str = "漢方AI診断支援システム"
    version: str = "1.0.0"
    description: str = "症状を入力して漢方処方の候補を取得する診断支援ツール"


@dataclass
class DataConfig:
    """結果データの上限"""
    version: str = "2024.1"
    max_top_choices: int = 3
    max_alternatives: int = 5
    max_followup_questions: int = 3


@dataclass
class ValidationConfig:
    """フォーム検証ルール"""
    chief_complaint_max_length: int = 200
    free_text_max_length: int = 1000
    concomitant_meds_max_length: int = 500

    # 漢字・ひらがな・カタカナ・長音・中点・読点・カンマ・ASCII英数字・空白
    concomitant_meds_pattern: str = r"[一-龯ぁ-ゟァ-ヶー・、，,\sA-Za-z0-9_]*"


@dataclass
class UIConfig:
    """画面設定"""
    default_language: str = "ja"
    supported_languages: List[str] = field(default_factory=lambda: ["ja", "en"])
    toast_duration_ms: int = 5000


@dataclass
class SessionConfig:
    """セッション・自動保存"""
    expiry_hours: int = 24
    max_followups: int = 5
    auto_save_interval_ms: int = 5000


@dataclass
class StorageKeys:
    """ローカルストレージのスロット名"""
    session_id: str = "kanpo_ai_session_id"
    form_data: str = "kanpo_ai_form_data"
    language: str = "kanpo_ai_language"
    # 予約済み (現在のロジックでは未使用)
    last_result: str = "kanpo_ai_last_result"


@dataclass
class StorageConfig:
    """永続化先。path が None ならメモリのみ"""
    path: Optional[str] = None


@dataclass
class DebugConfig:
    enabled: bool = False
    log_level: str = "info"


# =============================================================================
# MAIN CONFIG
# =============================================================================

@dataclass
class KanpoConfig:
    """
    Kanpo AI の全設定。

    例:
        config = KanpoConfig.for_host("localhost")
        config.api.diagnosis_url
        config.filter_tags(["pain_back", "bogus"])  # → ["pain_back"]
    """

    environment: Environment = Environment.PRODUCTION

    api: APIConfig = field(default_factory=APIConfig)
    app: AppInfo = field(default_factory=AppInfo)
    data: DataConfig = field(default_factory=DataConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    storage_keys: StorageKeys = field(default_factory=StorageKeys)
    storage: StorageConfig = field(default_factory=StorageConfig)
    debug: DebugConfig = field(default_factory=DebugConfig)

    # 静的データ (YAML には出さない)
    symptom_tags: Tuple[SymptomTag, ...] = SYMPTOM_TAGS
    messages: MessageCatalog = field(default_factory=MessageCatalog)

    # -------------------------------------------------------------------------

    @property
    def tag_ids(self) -> Tuple[str, ...]:
        return tuple(tag.id for tag in self.symptom_tags)

    def filter_tags(self, tags: Iterable[str]) -> List[str]:
        """カタログに無いタグを除外 (順序維持・重複除去)"""
        known = set(self.tag_ids)
        result = []
        for tag in tags:
            if tag in known and tag not in result:
                result.append(tag)
        return result

    def is_supported_language(self, code: Optional[str]) -> bool:
        return code in self.ui.supported_languages

    # -------------------------------------------------------------------------

    @classmethod
    def for_host(cls, hostname: Optional[str]) -> "KanpoConfig":
        """ホスト名から環境別の設定を作成"""
        environment = resolve_environment(hostname)
        config = cls(environment=environment)

        if environment == Environment.LOCAL:
            config.api.diagnosis_url = TEST_WEBHOOK_URL
            config.debug.enabled = True
            config.debug.log_level = "debug"
        elif environment == Environment.STAGING:
            config.api.diagnosis_url = PRODUCTION_WEBHOOK_URL
            config.debug.enabled = True

        return config

    @classmethod
    def from_env(cls, hostname: Optional[str] = None) -> "KanpoConfig":
        """環境変数から設定を作成 (KANPO_HOST で環境を決定し、個別値で上書き)"""
        config = cls.for_host(hostname or os.getenv("KANPO_HOST", "localhost"))

        if os.getenv("KANPO_DIAGNOSIS_URL"):
            config.api.diagnosis_url = os.environ["KANPO_DIAGNOSIS_URL"]
        if os.getenv("KANPO_FOLLOWUP_URL"):
            config.api.followup_url = os.environ["KANPO_FOLLOWUP_URL"]

        config.api.request_timeout_ms = _env_int("KANPO_REQUEST_TIMEOUT_MS", config.api.request_timeout_ms)
        config.api.max_retries = _env_int("KANPO_MAX_RETRIES", config.api.max_retries)
        config.api.retry_delay_ms = _env_int("KANPO_RETRY_DELAY_MS", config.api.retry_delay_ms)

        language = os.getenv("KANPO_DEFAULT_LANGUAGE")
        if language:
            if not config.is_supported_language(language):
                raise ConfigError(f"Unsupported KANPO_DEFAULT_LANGUAGE: {language}")
            config.ui.default_language = language

        if os.getenv("KANPO_STORAGE_PATH"):
            config.storage.path = os.environ["KANPO_STORAGE_PATH"]
        if os.getenv("KANPO_LOG_LEVEL"):
            config.debug.log_level = os.environ["KANPO_LOG_LEVEL"].lower()

        return config

    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """YAML 用の dict (静的データは除く)"""
        return {
            "environment": self.environment.value,
            "api": asdict(self.api),
            "app": asdict(self.app),
            "data": asdict(self.data),
            "validation": asdict(self.validation),
            "ui": asdict(self.ui),
            "session": asdict(self.session),
            "storage_keys": asdict(self.storage_keys),
            "storage": asdict(self.storage),
            "debug": asdict(self.debug),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "KanpoConfig":
        """dict → KanpoConfig。未知のキーは無視、欠けたキーはデフォルト"""
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config must be a mapping, got {type(data).__name__}")

        try:
            environment = Environment(data.get("environment", Environment.PRODUCTION.value))
        except ValueError as e:
            raise ConfigError(str(e)) from e

        kwargs = {"environment": environment}
        for name, section_cls in _SECTIONS.items():
            section = data.get(name) or {}
            if not isinstance(section, dict):
                raise ConfigError(f"Section '{name}' must be a mapping")
            known = {k: v for k, v in section.items() if k in section_cls.__dataclass_fields__}
            kwargs[name] = section_cls(**known)

        return cls(**kwargs)


_SECTIONS = {
    "api": APIConfig,
    "app": AppInfo,
    "data": DataConfig,
    "validation": ValidationConfig,
    "ui": UIConfig,
    "session": SessionConfig,
    "storage_keys": StorageKeys,
    "storage": StorageConfig,
    "debug": DebugConfig,
}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def get_default_config() -> KanpoConfig:
    """デフォルト設定 (production)"""
    return KanpoConfig()
