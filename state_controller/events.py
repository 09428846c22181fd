from __future__ import annotations

import asyncio
import json
import logging
from typing import AsyncIterator, Awaitable, Callable, Final, List, Optional

from api.schemas import WizardEvent

logger = logging.getLogger(__name__)

_KEEPALIVE_SEC: Final[float] = 15.0

EventCallback = Callable[[WizardEvent], None]


class EventHub:
    """ウィザードの変更通知を購読者に配る。

    同期コールバックと、SSE 用の接続ごとの asyncio.Queue の2種類を持つ。
    publish は同期で、イベントループ上から呼ばれる前提（ロックは置かない）。
    """

    def __init__(self) -> None:
        self._callbacks: List[EventCallback] = []
        self._queues: List[asyncio.Queue[WizardEvent]] = []

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        """コールバックを登録し、登録解除用の関数を返す。"""
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def publish(self, event: WizardEvent) -> None:
        for callback in list(self._callbacks):
            try:
                callback(event)
            except Exception as e:
                # 描画側の不具合でウィザードの操作自体は失敗させない
                logger.error(f"[EVENTS] Subscriber failed on {event.type}: {e}", exc_info=True)

        for queue in self._queues:
            queue.put_nowait(event)

        logger.debug(
            f"[EVENTS] Published {event.type} to {len(self._callbacks)} callbacks, "
            f"{len(self._queues)} streams"
        )

    @property
    def stream_count(self) -> int:
        return len(self._queues)

    def open_stream(self) -> asyncio.Queue[WizardEvent]:
        queue: asyncio.Queue[WizardEvent] = asyncio.Queue()
        self._queues.append(queue)
        return queue

    def close_stream(self, queue: asyncio.Queue[WizardEvent]) -> None:
        if queue in self._queues:
            self._queues.remove(queue)

    async def iter_events(
        self,
        is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
        keepalive: float = _KEEPALIVE_SEC,
    ) -> AsyncIterator[str]:
        """SSE の data 行を1つずつ返す非同期イテレータ。接続ごとにキューを持つ。

        イベントが来なくても keepalive 秒ごとにコメント行を返し、そのたびに切断を確認する。
        切断・キャンセル時は finally でキューを外す。
        """

        queue = self.open_stream()
        try:
            while True:
                if is_disconnected is not None and await is_disconnected():
                    logger.debug("[EVENTS] Stream client disconnected")
                    break
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=keepalive)
                except asyncio.TimeoutError:
                    yield ": keep-alive\n\n"
                    continue
                data = event.model_dump(mode="json")
                yield f"data: {json.dumps(data, ensure_ascii=False)}\n\n"
        finally:
            self.close_stream(queue)
