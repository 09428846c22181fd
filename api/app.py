from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from services.orders import OrderService
from state_controller.states import WizardContractError

from .schemas import OptionRequest, QuantityRequest, SendResponse, WizardScreen

logger = logging.getLogger(__name__)


def create_app(order_service: OrderService | None = None) -> FastAPI:
    """ウィザード1セッション分の HTTP 描画面を作る。

    OrderService は明示的に作って app.state に持たせる（モジュールのグローバルにはしない）。
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "order_service", None) is None:
            logger.info("[APP] Creating order service...")
            app.state.order_service = OrderService()
        yield
        logger.info("[APP] Shutting down")

    app = FastAPI(title="Cupcake Order Assistant", lifespan=lifespan)
    if order_service is not None:
        app.state.order_service = order_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # 開発環境ではすべてのオリジンを許可
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(WizardContractError)
    async def wizard_contract_error_handler(
        request: Request, exc: WizardContractError
    ) -> JSONResponse:
        # UI 側が提示していない値・イベントを送ってきた
        logger.warning(f"[APP] Rejected {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.get("/wizard", response_model=WizardScreen)
    async def get_screen(
        service: OrderService = Depends(get_order_service),
    ) -> WizardScreen:
        return service.screen()

    @app.post("/wizard/quantity", response_model=WizardScreen)
    async def select_quantity(
        body: QuantityRequest,
        service: OrderService = Depends(get_order_service),
    ) -> WizardScreen:
        return service.select_quantity(body.quantity)

    @app.post("/wizard/option", response_model=WizardScreen)
    async def select_option(
        body: OptionRequest,
        service: OrderService = Depends(get_order_service),
    ) -> WizardScreen:
        return service.select_option(body.value)

    @app.post("/wizard/next", response_model=WizardScreen)
    async def next_step(
        service: OrderService = Depends(get_order_service),
    ) -> WizardScreen:
        return service.next()

    @app.post("/wizard/back", response_model=WizardScreen)
    async def back(
        service: OrderService = Depends(get_order_service),
    ) -> WizardScreen:
        return service.back()

    @app.post("/wizard/cancel", response_model=WizardScreen)
    async def cancel(
        service: OrderService = Depends(get_order_service),
    ) -> WizardScreen:
        return service.cancel()

    @app.post("/wizard/send", response_model=SendResponse)
    async def send(
        service: OrderService = Depends(get_order_service),
    ) -> SendResponse:
        return service.send()

    @app.get("/events")
    async def sse_events(
        request: Request,
        service: OrderService = Depends(get_order_service),
    ) -> StreamingResponse:
        """SSE によるイベントストリーム。接続ごとに全イベントを受け取る。"""

        return StreamingResponse(
            service.controller.hub.iter_events(request.is_disconnected),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",  # nginx用の設定
            },
        )

    return app


def get_order_service(request: Request) -> OrderService:
    service = getattr(request.app.state, "order_service", None)
    if service is None:
        raise RuntimeError("OrderService not initialized. App lifespan may not have started.")
    return service


app = create_app()

__all__ = ["app", "create_app", "get_order_service"]
