"""
テスト: storage モジュール

実行: pytest tests/test_storage.py -v
"""

import json

import pytest

HOUR_MS = 60 * 60 * 1000


class FakeClock:
    """ミリ秒単位で手で進める時計 (呼び出すと秒を返す)"""

    def __init__(self, now_ms: int = 1_700_000_000_000):
        self.now_ms = now_ms

    def __call__(self) -> float:
        return self.now_ms / 1000.0

    def advance_ms(self, ms: int) -> None:
        self.now_ms += ms


def _snapshot(**overrides):
    from kanpo_ai.schemas import FormSnapshot

    data = dict(
        chief_complaint="腰痛",
        symptom_tags=["pain_back", "general_fatigue"],
        free_text="朝に悪化する",
        concomitant_meds="ロキソニン",
        consent=True,
    )
    data.update(overrides)
    return FormSnapshot(**data)


def test_roundtrip():
    """save → load で同じスナップショット"""
    from kanpo_ai.storage import FormPersistence, MemoryStore

    persistence = FormPersistence(MemoryStore())
    snapshot = _snapshot()

    assert persistence.save(snapshot) is True
    assert persistence.load() == snapshot

    print("✓ Snapshot round-trip")


def test_stored_format():
    """保存形式: camelCase + timestamp (ms)"""
    from kanpo_ai.storage import FormPersistence, MemoryStore

    store = MemoryStore()
    clock = FakeClock()
    persistence = FormPersistence(store, clock=clock)
    persistence.save(_snapshot())

    data = json.loads(store.get("kanpo_ai_form_data"))
    assert set(data) == {"chiefComplaint", "symptomTags", "freeText", "concomitantMeds", "consent", "timestamp"}
    assert data["chiefComplaint"] == "腰痛"
    assert data["timestamp"] == clock.now_ms

    print(f"✓ Stored keys: {sorted(data)}")


def test_expiry():
    """24 時間で期限切れ"""
    from kanpo_ai.storage import FormPersistence, MemoryStore

    clock = FakeClock()
    persistence = FormPersistence(MemoryStore(), clock=clock)
    persistence.save(_snapshot())

    clock.advance_ms(24 * HOUR_MS - 1)
    assert persistence.load() is not None

    clock.advance_ms(1)
    assert persistence.load() is None

    print("✓ Expired after 24h")


def test_corrupt_data():
    """壊れたデータ・timestamp なしは None"""
    from kanpo_ai.storage import FormPersistence, MemoryStore

    store = MemoryStore()
    persistence = FormPersistence(store)

    for raw in ("{not json", "[1, 2]", json.dumps({"chiefComplaint": "腰痛"}),
                json.dumps({"chiefComplaint": "腰痛", "timestamp": "yesterday"})):
        store.set("kanpo_ai_form_data", raw)
        assert persistence.load() is None

    assert FormPersistence(MemoryStore()).load() is None

    print("✓ Corrupt data ignored")


def test_missing_fields_default():
    """欠けた値は空・False"""
    from kanpo_ai.storage import FormPersistence, MemoryStore
    from kanpo_ai.schemas import Language

    clock = FakeClock()
    store = MemoryStore()
    store.set("kanpo_ai_form_data", json.dumps({"chiefComplaint": "頭痛", "symptomTags": None,
                                                "timestamp": clock.now_ms}))
    restored = FormPersistence(store, clock=clock).load(Language.ENGLISH)

    assert restored.chief_complaint == "頭痛"
    assert restored.symptom_tags == []
    assert restored.consent is False
    assert restored.language == Language.ENGLISH

    print("✓ Missing fields default")


def test_storage_failures_swallowed():
    """容量超過・無効化でも例外は出ない"""
    from kanpo_ai.storage import FormPersistence, MemoryStore

    disabled = FormPersistence(MemoryStore(disabled=True))
    assert disabled.save(_snapshot()) is False
    assert disabled.load() is None
    assert disabled.clear() is False
    assert disabled.save_language("en") is False
    assert disabled.load_language() is None
    assert disabled.load_session_id() is None

    tiny = FormPersistence(MemoryStore(max_bytes=10))
    assert tiny.save(_snapshot()) is False
    assert tiny.load() is None

    print("✓ Storage failures swallowed")


def test_clear_keeps_language_and_session():
    """clear はフォームのスロットのみ削除"""
    from kanpo_ai.storage import FormPersistence, MemoryStore
    from kanpo_ai.schemas import Language

    store = MemoryStore()
    persistence = FormPersistence(store)
    persistence.save(_snapshot())
    persistence.save_language(Language.ENGLISH)
    persistence.save_session_id("session-1")

    persistence.clear()

    assert "kanpo_ai_form_data" not in store
    assert persistence.load() is None
    assert persistence.load_language() == Language.ENGLISH
    assert persistence.load_session_id() == "session-1"

    print("✓ Clear removes only the form slot")


def test_language_preference():
    """未対応の言語コードは無視"""
    from kanpo_ai.storage import FormPersistence, MemoryStore

    store = MemoryStore()
    persistence = FormPersistence(store)

    assert persistence.load_language() is None
    store.set("kanpo_ai_language", "fr")
    assert persistence.load_language() is None
    persistence.save_language("en")
    assert persistence.load_language().value == "en"

    print("✓ Language preference")


def test_json_file_store(tmp_path):
    """JsonFileStore: ファイルに永続化"""
    from kanpo_ai.storage import FormPersistence, JsonFileStore, StorageError

    path = tmp_path / "state" / "storage.json"
    persistence = FormPersistence(JsonFileStore(str(path)))
    snapshot = _snapshot()

    persistence.save(snapshot)
    persistence.save_session_id("session-1")
    assert path.exists()

    reopened = FormPersistence(JsonFileStore(str(path)))
    assert reopened.load() == snapshot
    assert reopened.load_session_id() == "session-1"

    reopened.clear()
    assert "kanpo_ai_form_data" not in json.loads(path.read_text(encoding="utf-8"))

    path.write_text("not json", encoding="utf-8")
    try:
        JsonFileStore(str(path)).get("kanpo_ai_form_data")
        raised = False
    except StorageError:
        raised = True
    assert raised
    assert FormPersistence(JsonFileStore(str(path))).load() is None

    print(f"✓ JsonFileStore: {path.name}")


def test_from_config(tmp_path):
    """設定からストアを選択"""
    from kanpo_ai.config import KanpoConfig
    from kanpo_ai.storage import FormPersistence, JsonFileStore, MemoryStore

    config = KanpoConfig()
    assert isinstance(FormPersistence.from_config(config).store.inner, MemoryStore)

    config.storage.path = str(tmp_path / "storage.json")
    persistence = FormPersistence.from_config(config)
    assert isinstance(persistence.store.inner, JsonFileStore)
    assert persistence.expiry_hours == 24

    # 明示的に渡したストアは接頭辞なし
    shared = MemoryStore()
    assert FormPersistence.from_config(config, store=shared).store is shared

    print("✓ Store chosen from config")


def test_scoped_slots_are_isolated(tmp_path):
    """同じ設定から作った二つの永続化は互いのスロットを見ない"""
    from kanpo_ai.config import KanpoConfig
    from kanpo_ai.schemas import FormSnapshot
    from kanpo_ai.storage import FormPersistence

    config = KanpoConfig()
    config.storage.path = str(tmp_path / "storage.json")

    first = FormPersistence.from_config(config)
    second = FormPersistence.from_config(config)
    assert first.save(FormSnapshot(chief_complaint="患者Aの主訴"))
    assert first.save_language("en")

    assert second.load() is None
    assert second.load_language() is None

    # 同じ scope なら再読み込み後も復元できる
    reopened = FormPersistence.from_config(config, scope=first.store.scope)
    assert reopened.load().chief_complaint == "患者Aの主訴"

    second.clear()
    assert first.load().chief_complaint == "患者Aの主訴"

    print("✓ Per-user slots isolated")


def test_scoped_store_prefixes_keys():
    """ScopedStore: キーに接頭辞を付けて委譲"""
    from kanpo_ai.storage import MemoryStore, ScopedStore

    shared = MemoryStore()
    store = ScopedStore(shared, "browser-a")
    store.set("kanpo_ai_language", "en")

    assert shared.get("browser-a:kanpo_ai_language") == "en"
    assert "kanpo_ai_language" in store
    assert ScopedStore(shared, "browser-b").get("kanpo_ai_language") is None

    store.remove("kanpo_ai_language")
    assert shared.keys() == []

    with pytest.raises(ValueError):
        ScopedStore(shared, "")

    print("✓ ScopedStore")


if __name__ == "__main__":
    test_roundtrip()
    test_stored_format()
    test_expiry()
    test_corrupt_data()
    test_missing_fields_default()
    test_storage_failures_swallowed()
    test_clear_keeps_language_and_session()
    test_language_preference()
    print("\n✅ 全テスト成功!")
