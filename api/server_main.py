#!/usr/bin/env python
"""サーバーエントリポイント: 環境変数から設定を読んで uvicorn で API を起動する。"""

from __future__ import annotations

import logging
import os

import uvicorn



def resolve_log_level(name: str | None) -> int:
    """ログレベル名を数値にする。知らない名前は INFO 扱い。"""
    level = logging.getLevelName((name or "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


logging.basicConfig(level=resolve_log_level(os.getenv("CUPCAKE_LOG_LEVEL")))
logger = logging.getLogger(__name__)


def main() -> None:
    host = os.getenv("CUPCAKE_HOST", "127.0.0.1")
    port = int(os.getenv("CUPCAKE_PORT", "8000"))
    logger.info(f"[SERVER_MAIN] Starting Cupcake Order Assistant on {host}:{port}")
    logger.info(f"[SERVER_MAIN] Share target: {os.getenv('CUPCAKE_SHARE_TARGET', 'log')}")

    try:
        uvicorn.run("api.app:app", host=host, port=port)
    except KeyboardInterrupt:
        logger.info("[SERVER_MAIN] Shutting down...")


if __name__ == "__main__":
    main()
