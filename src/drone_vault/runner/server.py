"""HTTP endpoint answering Drone's secret requests."""

from __future__ import annotations

import logging
import threading
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel, Field, ValidationError

from drone_vault import __version__
from drone_vault.core.exceptions import DroneVaultError, UpstreamError
from drone_vault.core.secrets.base import Build, Repo, SecretRequest
from drone_vault.core.secrets.resolver import SecretResolver
from drone_vault.core.token.credential import CredentialCell
from drone_vault.runner.signature import SignatureError, verify

logger = logging.getLogger(__name__)

LOOKUP_FAILED = "secret lookup failed"


class BuildBody(BaseModel):
    """Subset of Drone's build object used for policy checks."""

    event: str | None = None
    ref: str | None = None
    target: str | None = None
    fork: str | None = None


class RepoBody(BaseModel):
    """Subset of Drone's repository object used for policy checks."""

    slug: str | None = None


class SecretRequestBody(BaseModel):
    """Secret request as posted by Drone; unknown fields are ignored."""

    path: str = ""
    name: str = ""
    build: BuildBody = Field(default_factory=BuildBody)
    repo: RepoBody = Field(default_factory=RepoBody)

    def to_request(self) -> SecretRequest:
        return SecretRequest(
            path=self.path,
            name=self.name,
            build=Build(
                event=self.build.event or "",
                ref=self.build.ref or "",
                target=self.build.target or "",
                fork=self.build.fork or "",
            ),
            repo=Repo(slug=self.repo.slug or ""),
        )


def create_app(
    resolver: SecretResolver,
    secret: str,
    cell: CredentialCell | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        resolver: Resolver answering secret requests.
        secret: Shared secret used to verify request signatures.
        cell: Credential cell reported by the health endpoint.
    """
    app = FastAPI(
        title="drone-vault",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.post("/")
    async def find_secret(request: Request) -> Response:
        body = await request.body()
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"
        try:
            verify(secret, request.method, target, request.headers, body)
        except SignatureError as exc:
            logger.debug("rejected request: %s", exc)
            return PlainTextResponse(str(exc), status_code=400)

        try:
            payload = SecretRequestBody.model_validate_json(body)
        except ValidationError:
            return PlainTextResponse("Invalid Input", status_code=400)

        try:
            found = await run_in_threadpool(resolver.find, payload.to_request())
        except UpstreamError as exc:
            logger.warning("vault: %s", exc)
            return PlainTextResponse(LOOKUP_FAILED, status_code=404)
        except DroneVaultError as exc:
            return PlainTextResponse(str(exc), status_code=404)
        return JSONResponse(found.to_dict())

    @app.get("/healthz")
    def healthz() -> dict[str, Any]:
        state = cell.state.value if cell is not None else "unknown"
        return {"status": "ok", "vault": state}

    return app


def parse_bind(bind: str) -> tuple[str, int]:
    """Split a listen address such as ``":3000"`` into host and port.

    Raises:
        ValueError: If the port is missing or not a number.
    """
    host, sep, port = bind.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid bind address: {bind!r}")
    host = host.strip("[]") or "0.0.0.0"
    return host, int(port)


class ServerService:
    """Serve the application with uvicorn until stopped.

    Args:
        app: The ASGI application.
        bind: Listen address, e.g. ``":3000"`` or ``"127.0.0.1:8080"``.
    """

    name = "server"

    def __init__(self, app: FastAPI, bind: str) -> None:
        host, port = parse_bind(bind)
        self._bind = bind
        self._server = uvicorn.Server(
            uvicorn.Config(app, host=host, port=port, log_config=None, access_log=False)
        )
        self._stopping = threading.Event()

    def run(self) -> None:
        logger.info("server listening on address %s", self._bind)
        try:
            self._server.run()
        except SystemExit as exc:
            raise RuntimeError(f"http server exited with status {exc.code}") from exc
        if not self._stopping.is_set():
            raise RuntimeError("http server stopped unexpectedly")

    def stop(self) -> None:
        self._stopping.set()
        self._server.should_exit = True
