#!/usr/bin/env python3
"""
Kanpo AI — Web UI の起動 (Streamlit)

起動:
    python scripts/run_web.py
    python scripts/run_web.py --port 8501
    python scripts/run_web.py --sandbox http://127.0.0.1:5678

備考:
    --sandbox を付けると診断・追加質問の送信先をサンドボックス Webhook に切り替える
    (先に python scripts/run_sandbox.py で起動しておく)。
"""

import os
import sys
import subprocess
import argparse
from pathlib import Path

# プロジェクトのパス
project_root = Path(__file__).parent.parent
web_ui_path = project_root / "kanpo_ai" / "web_ui" / "app.py"


def main():
    parser = argparse.ArgumentParser(description='Kanpo AI Web UI')
    parser.add_argument('--port', type=int, default=8501, help='Port (default: 8501)')
    parser.add_argument('--host', default='localhost', help='Host (default: localhost)')
    parser.add_argument('--sandbox', metavar='URL', default=None,
                        help='Sandbox webhook base URL (e.g. http://127.0.0.1:5678)')
    parser.add_argument('--log-level', default=None, help='KANPO_LOG_LEVEL (debug, info, ...)')

    args = parser.parse_args()

    env = dict(os.environ)
    env.setdefault("KANPO_HOST", args.host)
    if args.sandbox:
        base = args.sandbox.rstrip("/")
        env["KANPO_DIAGNOSIS_URL"] = f"{base}/webhook/diagnosis"
        env["KANPO_FOLLOWUP_URL"] = f"{base}/webhook/followup"
    if args.log_level:
        env["KANPO_LOG_LEVEL"] = args.log_level

    print("=" * 60)
    print("🌿 Kanpo AI — Web UI (Streamlit)")
    print("=" * 60)
    print(f"   App: {web_ui_path}")
    print(f"   URL: http://{args.host}:{args.port}")
    if args.sandbox:
        print(f"   Webhook: {env['KANPO_DIAGNOSIS_URL']}")
    print("=" * 60)

    # streamlit の確認
    try:
        import streamlit
        print(f"✅ Streamlit version: {streamlit.__version__}")
    except ImportError:
        print("❌ Streamlit がインストールされていません")
        print("   インストール: python -m pip install streamlit")
        sys.exit(1)

    if not web_ui_path.exists():
        print(f"❌ ファイルが見つかりません: {web_ui_path}")
        sys.exit(1)

    print()
    print("🚀 Streamlit を起動します...")
    print()

    cmd = [
        sys.executable, "-m", "streamlit", "run",
        str(web_ui_path),
        "--server.port", str(args.port),
        "--server.address", args.host,
        "--browser.gatherUsageStats", "false",
    ]

    try:
        subprocess.run(cmd, env=env)
    except KeyboardInterrupt:
        print("\n🛑 停止しました")


if __name__ == "__main__":
    main()
