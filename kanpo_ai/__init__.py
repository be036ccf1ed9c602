"""
Kanpo AI — 漢方AI診断支援システム (フロントエンド)

症状入力フォーム → 検証 → 診断Webhookへ送信 → 処方候補を表示。

モジュール:
- config: 設定、症状タグカタログ、多言語メッセージ
- schemas: pydanticモデル (FormSnapshot, DiagnosisResult, ...)
- validation: フォーム検証
- storage: ローカル永続化 (フォームのスナップショット、言語、セッションID)
- client: 診断Webhookクライアント
- render: 結果のHTMLレンダリング
- controller: 送信・追加質問・クリアのライフサイクル
- api: 開発用サンドボックスWebhook
- web_ui: Streamlitページ
"""

__version__ = "1.0.0"

from .config import KanpoConfig, get_default_config
