#!/usr/bin/env python3
"""
Kanpo AI — サンドボックス Webhook の起動

起動:
    python scripts/run_sandbox.py
    python scripts/run_sandbox.py --port 5678
    python scripts/run_sandbox.py --latency-ms 3000
"""

import os
import sys
import argparse
from pathlib import Path

# プロジェクトのルートを追加
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def main():
    parser = argparse.ArgumentParser(description='Kanpo AI Sandbox Webhook')
    parser.add_argument('--host', default='127.0.0.1', help='Host (default: 127.0.0.1)')
    parser.add_argument('--port', type=int, default=5678, help='Port (default: 5678)')
    parser.add_argument('--latency-ms', type=int, default=0, help='Artificial response delay')
    parser.add_argument('--reload', action='store_true', help='Enable auto-reload')

    args = parser.parse_args()

    # kanpo_ai.api.config は import 時に環境変数を読む
    os.environ["KANPO_SANDBOX_HOST"] = args.host
    os.environ["KANPO_SANDBOX_PORT"] = str(args.port)
    os.environ["KANPO_SANDBOX_LATENCY_MS"] = str(args.latency_ms)

    print("=" * 60)
    print("🌿 Kanpo AI — Sandbox Webhook")
    print("=" * 60)
    print(f"   Host: {args.host}")
    print(f"   Port: {args.port}")
    print(f"   Latency: {args.latency_ms}ms")
    print(f"   Reload: {args.reload}")
    print("=" * 60)

    try:
        import uvicorn
    except ImportError:
        print("❌ uvicorn がインストールされていません")
        print("   インストール: pip install uvicorn[standard]")
        sys.exit(1)

    try:
        import fastapi
    except ImportError:
        print("❌ fastapi がインストールされていません")
        print("   インストール: pip install fastapi")
        sys.exit(1)

    uvicorn.run(
        "kanpo_ai.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
