from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Final, Protocol
from uuid import uuid4

logger = logging.getLogger(__name__)

_DEFAULT_OUTBOX_DIR: Final[str] = "outbox"


class ShareTarget(Protocol):
    """Export collaborator: hands the order summary to some "share text" action."""

    def share(self, subject: str, body: str) -> None: ...


class LoggingShareAdapter:
    """Development adapter that only writes the shared text to the log."""

    def share(self, subject: str, body: str) -> None:
        logger.info("[SHARE] %s\n%s", subject, body)


class OutboxShareAdapter:
    """Writes each shared order as a plain-text file into an outbox directory.

    Another process (mailer, printer, chat bot...) is expected to pick the
    files up. One file per order; nothing is ever read back.
    """

    def __init__(self, outbox_dir: str | os.PathLike[str] | None = None) -> None:
        self.outbox_dir = Path(
            outbox_dir or os.getenv("CUPCAKE_OUTBOX_DIR", _DEFAULT_OUTBOX_DIR)
        )

    def share(self, subject: str, body: str) -> None:
        self.outbox_dir.mkdir(parents=True, exist_ok=True)
        name = f"{datetime.now():%Y%m%d-%H%M%S}-{uuid4().hex[:8]}.txt"
        path = self.outbox_dir / name
        path.write_text(f"Subject: {subject}\n\n{body}\n", encoding="utf-8")
        logger.info("[SHARE] Wrote order summary to %s", path)


def create_share_adapter(target: str | None = None) -> ShareTarget:
    """環境変数 CUPCAKE_SHARE_TARGET から共有先を選ぶ（log / outbox）。"""

    target = (target or os.getenv("CUPCAKE_SHARE_TARGET", "log")).lower()
    if target == "outbox":
        return OutboxShareAdapter()
    if target != "log":
        logger.warning("[SHARE] Unknown share target %r, falling back to log", target)
    return LoggingShareAdapter()
