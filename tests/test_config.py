"""
テスト: config モジュール

実行: pytest tests/test_config.py -v
デモ: python tests/test_config.py
"""

import pytest


def test_default_config():
    """デフォルト設定 (production)"""
    from kanpo_ai.config import get_default_config, Environment, PRODUCTION_WEBHOOK_URL

    config = get_default_config()

    assert config.environment == Environment.PRODUCTION
    assert config.api.diagnosis_url == PRODUCTION_WEBHOOK_URL
    assert config.api.request_timeout_ms == 90000
    assert config.api.timeout_seconds == 90.0
    assert config.api.timeouts == (10.0, 80.0)
    assert config.session.expiry_hours == 24
    assert config.session.auto_save_interval_ms == 5000
    assert config.validation.chief_complaint_max_length == 200
    assert config.validation.free_text_max_length == 1000

    print(f"✓ Default config: {config.environment.value}, timeout={config.api.request_timeout_ms}ms")


def test_followup_url_fallback():
    """追加質問の URL が未設定なら診断 URL を使う"""
    from kanpo_ai.config import APIConfig

    api = APIConfig(diagnosis_url="http://example.test/diag")
    assert api.effective_followup_url == "http://example.test/diag"

    api.followup_url = "http://example.test/followup"
    assert api.effective_followup_url == "http://example.test/followup"

    print("✓ Follow-up URL falls back to diagnosis URL")


def test_resolve_environment():
    """ホスト名 → 実行環境"""
    from kanpo_ai.config import resolve_environment, Environment

    assert resolve_environment("localhost") == Environment.LOCAL
    assert resolve_environment("127.0.0.1") == Environment.LOCAL
    assert resolve_environment("localhost:8501") == Environment.LOCAL
    assert resolve_environment("kanpo-staging.example.com") == Environment.STAGING
    assert resolve_environment("kanpo.example.com") == Environment.PRODUCTION
    assert resolve_environment("") == Environment.PRODUCTION
    assert resolve_environment(None) == Environment.PRODUCTION

    print("✓ Hosts map to local / staging / production")


def test_for_host():
    """環境ごとの Webhook と debug 設定"""
    from kanpo_ai.config import KanpoConfig, TEST_WEBHOOK_URL, PRODUCTION_WEBHOOK_URL

    local = KanpoConfig.for_host("localhost")
    assert local.api.diagnosis_url == TEST_WEBHOOK_URL
    assert local.debug.enabled is True
    assert local.debug.log_level == "debug"

    staging = KanpoConfig.for_host("staging.example.com")
    assert staging.api.diagnosis_url == PRODUCTION_WEBHOOK_URL
    assert staging.debug.enabled is True

    production = KanpoConfig.for_host("kanpo.example.com")
    assert production.api.diagnosis_url == PRODUCTION_WEBHOOK_URL
    assert production.debug.enabled is False

    print("✓ Environment-specific endpoints")


def test_from_env(monkeypatch):
    """環境変数による上書き"""
    from kanpo_ai.config import KanpoConfig, Environment

    monkeypatch.setenv("KANPO_HOST", "kanpo.example.com")
    monkeypatch.setenv("KANPO_DIAGNOSIS_URL", "http://127.0.0.1:5678/webhook/diagnosis")
    monkeypatch.setenv("KANPO_FOLLOWUP_URL", "http://127.0.0.1:5678/webhook/followup")
    monkeypatch.setenv("KANPO_REQUEST_TIMEOUT_MS", "1500")
    monkeypatch.setenv("KANPO_MAX_RETRIES", "0")
    monkeypatch.setenv("KANPO_DEFAULT_LANGUAGE", "en")
    monkeypatch.setenv("KANPO_LOG_LEVEL", "WARNING")

    config = KanpoConfig.from_env()

    assert config.environment == Environment.PRODUCTION
    assert config.api.diagnosis_url.endswith("/webhook/diagnosis")
    assert config.api.effective_followup_url.endswith("/webhook/followup")
    assert config.api.request_timeout_ms == 1500
    assert config.api.timeouts == (0.75, 0.75)
    assert config.api.max_retries == 0
    assert config.ui.default_language == "en"
    assert config.debug.log_level == "warning"

    print("✓ Environment variable overrides")


def test_from_env_rejects_bad_values(monkeypatch):
    """不正な環境変数は ConfigError"""
    from kanpo_ai.config import KanpoConfig, ConfigError

    monkeypatch.setenv("KANPO_REQUEST_TIMEOUT_MS", "soon")
    with pytest.raises(ConfigError):
        KanpoConfig.from_env("localhost")

    monkeypatch.delenv("KANPO_REQUEST_TIMEOUT_MS")
    monkeypatch.setenv("KANPO_DEFAULT_LANGUAGE", "fr")
    with pytest.raises(ConfigError):
        KanpoConfig.from_env("localhost")

    print("✓ Invalid overrides rejected")


def test_filter_tags():
    """カタログに無いタグは除外"""
    from kanpo_ai.config import get_default_config

    config = get_default_config()

    assert len(config.tag_ids) == 26
    assert config.filter_tags(["pain_back", "bogus", "pain_back", "pain_head"]) == ["pain_back", "pain_head"]

    print(f"✓ {len(config.tag_ids)} symptom tags, unknown ones filtered")


def test_messages():
    """メッセージ辞書 (ja / en, プレースホルダ, フォールバック)"""
    from kanpo_ai.config import MessageCatalog

    messages = MessageCatalog()

    assert messages.languages == ("ja", "en")
    assert messages.text("chief_complaint_too_long", "en", limit=200) == \
        "Chief complaint must be 200 characters or fewer"
    assert "200" in messages.text("chief_complaint_too_long", "ja", limit=200)
    assert messages.text("TIMEOUT_ERROR", "fr") == messages.text("TIMEOUT_ERROR", "ja")
    assert messages.text("no_such_key", "en") == "no_such_key"

    small = MessageCatalog(translations={"ja": {"title": "テスト"}})
    assert small.text("title", "en") == "テスト"

    print("✓ Message catalog lookups")


def test_yaml_roundtrip(tmp_path):
    """YAML への保存と読み込み"""
    from kanpo_ai.config import KanpoConfig, save_config, load_config, Environment

    config = KanpoConfig.for_host("localhost")
    config.api.max_retries = 1
    config.storage.path = str(tmp_path / "storage.json")

    path = tmp_path / "config" / "kanpo.yaml"
    save_config(config, str(path))
    assert path.exists()
    assert "漢方AI診断支援システム" in path.read_text(encoding="utf-8")

    loaded = load_config(str(path))
    assert loaded.environment == Environment.LOCAL
    assert loaded.api.diagnosis_url == config.api.diagnosis_url
    assert loaded.api.max_retries == 1
    assert loaded.storage.path == config.storage.path

    print(f"✓ YAML saved and loaded: {path.name}")


def test_load_config_errors(tmp_path):
    """壊れた YAML・未知のキー"""
    from kanpo_ai.config import load_config, ConfigError

    partial = tmp_path / "partial.yaml"
    partial.write_text("api:\n  max_retries: 5\n  unknown_key: 1\nextra: true\n", encoding="utf-8")
    config = load_config(str(partial))
    assert config.api.max_retries == 5
    assert config.api.request_timeout_ms == 90000

    broken = tmp_path / "broken.yaml"
    broken.write_text("api: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(broken))

    with pytest.raises(ConfigError):
        load_config(str(tmp_path / "missing.yaml"))

    not_mapping = tmp_path / "list.yaml"
    not_mapping.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(not_mapping))

    print("✓ Config errors raised, unknown keys ignored")


def demo():
    print("=" * 50)
    print("Kanpo AI — 設定のテスト")
    print("=" * 50)

    from kanpo_ai.config import KanpoConfig

    config = KanpoConfig.for_host("localhost")

    print(f"環境: {config.environment.value}")
    print(f"Webhook: {config.api.diagnosis_url}")
    print(f"タイムアウト: {config.api.request_timeout_ms}ms")
    print(f"リトライ: {config.api.max_retries} 回 / {config.api.retry_delay_ms}ms")
    print(f"症状タグ: {len(config.symptom_tags)}")

    test_resolve_environment()
    test_for_host()
    test_filter_tags()
    test_messages()

    print("=" * 50)
    print("✅ 成功!")


if __name__ == "__main__":
    demo()
