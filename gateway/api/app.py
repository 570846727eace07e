"""
Boardbots browser gateway.

Gates every browser request on the SESSION cookie, runs the login flow, and
forwards game-state queries to the Boardbots gRPC service.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict

from fastapi import FastAPI, Form, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse

from gateway.auth.config import GatewayConfig, load_gateway_config
from gateway.auth.gate import SessionGate
from gateway.auth.local import CredentialStore, CredentialStoreError
from gateway.auth.models import GateAction
from gateway.auth.service import CredentialService
from gateway.auth.session import fallback_cookie, session_cookie, session_token_from_cookies
from gateway.rpc.channel import RpcChannel
from gateway.rpc.client import BoardbotsClient
from gateway.rpc.interceptors import MetadataInterceptor
from gateway.rpc.views import game_view

logger = logging.getLogger(__name__)

LOGIN_FAILED_QUERY = "auth=fail"

_LOGIN_FORM = """<!DOCTYPE html>
<html>
<head><title>BoardBots</title></head>
<body>
<h1>BoardBots</h1>
{notice}
<form method="post" action="/auth/auth">
  <label>Name <input type="text" name="name" autocomplete="username"></label>
  <label>Password <input type="password" name="password" autocomplete="current-password"></label>
  <button type="submit">Log in</button>
</form>
</body>
</html>
"""


@dataclass
class GatewayContext:
    """Process-wide collaborators, built once per app and kept on app.state."""

    cfg: GatewayConfig
    channel: RpcChannel
    client: BoardbotsClient
    store: CredentialStore
    credentials: CredentialService
    gate: SessionGate


def build_context(cfg: GatewayConfig) -> GatewayContext:
    channel = RpcChannel(cfg)
    client = BoardbotsClient(channel, timeout=cfg.rpc_timeout_seconds)
    store = CredentialStore(cfg.dev_users_file)
    return GatewayContext(
        cfg=cfg,
        channel=channel,
        client=client,
        store=store,
        credentials=CredentialService(client, store),
        gate=SessionGate(cfg),
    )


_context_lock = threading.Lock()


def get_context(app: FastAPI) -> GatewayContext:
    ctx = getattr(app.state, "gateway", None)
    if ctx is not None:
        return ctx
    with _context_lock:
        ctx = getattr(app.state, "gateway", None)
        if ctx is None:
            ctx = build_context(load_gateway_config())
            app.state.gateway = ctx
        return ctx


def create_app() -> FastAPI:
    app = FastAPI(title="Boardbots gateway")

    @app.on_event("startup")
    def _startup_build_context() -> None:
        ctx = get_context(app)
        logger.info(
            "Gateway config: env=%s rpc_address=%s backend=%s dev_users_file=%s",
            ctx.cfg.env,
            ctx.cfg.rpc_address,
            ctx.cfg.backend_url,
            ctx.cfg.dev_users_file,
        )

    @app.exception_handler(CredentialStoreError)
    async def _credential_store_error(request: Request, exc: CredentialStoreError) -> JSONResponse:
        logger.error("%s %s - credential store unavailable: %s", request.method, request.url.path, str(exc))
        return JSONResponse(status_code=500, content={"detail": "Credential store unavailable"})

    @app.middleware("http")
    async def gate_requests(request: Request, call_next):
        """Session gate plus request logging."""
        start_time = time.time()
        path = request.url.path or ""
        logger.debug("%s %s", request.method, path)
        try:
            gate = get_context(request.app).gate
            decision = await gate.evaluate(path, session_token_from_cookies(request.cookies))

            if decision.action == GateAction.REDIRECT:
                response = RedirectResponse(url=decision.target or "/", status_code=302)
            elif decision.action == GateAction.DENY:
                # No `WWW-Authenticate`: browsers would pop a basic-auth modal.
                response = JSONResponse(status_code=401, content={"detail": "Unauthorized"})
            else:
                response = await call_next(request)

            process_time = time.time() - start_time
            logger.debug("%s %s - %d (%.3fs)", request.method, path, response.status_code, process_time)
            return response
        except Exception as e:
            process_time = time.time() - start_time
            logger.exception("%s %s - ERROR after %.3fs: %s", request.method, path, process_time, str(e))
            raise

    @app.get("/healthz")
    def healthz() -> Dict[str, Any]:
        return {"ok": True}

    @app.get("/")
    def index() -> Dict[str, Any]:
        return {"ok": True, "title": "BoardBots"}

    @app.get("/users")
    def users() -> PlainTextResponse:
        return PlainTextResponse("respond with a resource")

    @app.get("/auth/login")
    def auth_login(request: Request, auth: str = Query("")) -> HTMLResponse:
        """Login form; only served in development mode."""
        ctx = get_context(request.app)
        if not ctx.cfg.dev_mode:
            return HTMLResponse(status_code=403, content="Forbidden")
        notice = '<p class="error">Login failed.</p>' if auth else ""
        return HTMLResponse(content=_LOGIN_FORM.format(notice=notice))

    @app.post("/auth/auth")
    async def auth_submit(request: Request, name: str = Form(""), password: str = Form("")) -> RedirectResponse:
        """
        Authenticate the submitted credentials.

        Success sets the SESSION cookie and redirects home; failure redirects
        back to the login form with a failure flag.
        """
        ctx = get_context(request.app)
        # Submitted values go through untouched; the store matches exactly.
        issued = await ctx.credentials.authenticate(name, password)

        if issued is None:
            resp = RedirectResponse(url=f"{ctx.cfg.login_path}?{LOGIN_FAILED_QUERY}", status_code=302)
            resp.headers["Cache-Control"] = "no-store"
            return resp

        logger.info("Login succeeded for %s (source=%s)", name, issued.source)
        resp = RedirectResponse(url="/", status_code=302)
        resp.headers["Cache-Control"] = "no-store"
        resp.set_cookie(**session_cookie(ctx.cfg, issued.value).as_kwargs())
        if issued.from_fallback:
            resp.set_cookie(**fallback_cookie(ctx.cfg, issued.value).as_kwargs())
        return resp

    @app.get("/connect")
    async def connect(request: Request, game_id: str = Query(..., alias="id"), token: str = Query("")) -> JSONResponse:
        """
        Fetch a game's state from the backend.

        The `token` query parameter (not the session cookie) is what the
        backend sees in the call metadata.
        """
        ctx = get_context(request.app)
        interceptor = MetadataInterceptor(token)
        result = await ctx.client.get_games_async(game_id, interceptors=(interceptor,))
        if not result.ok:
            return JSONResponse(status_code=502, content={"error": result.error, "code": result.code})
        game = game_view(result.value)
        return JSONResponse(content={"uuid": game.game_id, "game": game.model_dump(mode="json")})

    return app


app = create_app()


def run(host: str = "0.0.0.0", port: int = 3000) -> None:
    import uvicorn

    # Configure logging for the application
    log_level = os.getenv("LOG_LEVEL", "info").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.setLevel(getattr(logging, log_level, logging.INFO))

    # Map Python logging levels to uvicorn log levels
    uvicorn_log_level = (
        log_level.lower() if log_level.lower() in ["critical", "error", "warning", "info", "debug", "trace"] else "info"
    )

    logger.info("Starting gateway on %s:%d (log_level=%s)", host, port, log_level)
    uvicorn.run(app, host=host, port=port, log_level=uvicorn_log_level)
