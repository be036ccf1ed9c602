"""
Kanpo AI — Web UI

Streamlit の症状入力フォーム。

起動:
    streamlit run kanpo_ai/web_ui/app.py

    または:

    python scripts/run_web.py

ローカルのサンドボックス Webhook に向ける場合:
    python scripts/run_sandbox.py
    python scripts/run_web.py --sandbox http://127.0.0.1:5678
"""
