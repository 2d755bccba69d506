"""Shared pytest fixtures for vismatch client tests."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from PIL import Image

from vismatch_client.services.api_client import ApiClient
from vismatch_client.services.codec import Codec

BASE_URL = "http://testserver"


class FakeVismatchServer:
    """In-process stand-in for the vismatch service.

    Records every request so tests can assert on call order and payloads.
    Behaviour is steered through plain attributes:

    * ``reject`` -- image name -> message returned with ``success: false``
    * ``crash`` -- image names answered with a bare 500
    * ``compare_result`` -- entries returned by ``POST /diff``
    * ``gate`` -- when set, uploads wait on this event before answering
    """

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []
        self.uploads: list[dict[str, Any]] = []
        self.compares: list[dict[str, Any]] = []
        self.deleted: list[str] = []
        self.projects: set[str] = {"demo"}
        self.reject: dict[str, str] = {}
        self.crash: set[str] = set()
        self.compare_result: list[dict[str, Any]] = []
        self.gate: asyncio.Event | None = None
        self.app = self._build_app()

    @property
    def request_count(self) -> int:
        return len(self.uploads) + len(self.compares) + len(self.deleted)

    def _build_app(self) -> FastAPI:
        app = FastAPI()

        @app.post("/upload")
        async def upload(request: Request):
            body = await request.json()
            name = body["image_name"]
            self.events.append(("start", name))
            self.uploads.append(body)
            if self.gate is not None:
                await self.gate.wait()
            await asyncio.sleep(0)
            self.events.append(("end", name))

            if name in self.crash:
                return PlainTextResponse("Internal Server Error", status_code=500)
            if name in self.reject:
                return {"success": False, "message": self.reject[name], "token": ""}
            self.projects.add(body["project_name"])
            return {
                "success": True,
                "message": f"{name} uploaded",
                "token": f"tok-{len(self.uploads)}",
            }

        @app.post("/diff")
        async def diff(request: Request):
            body = await request.json()
            self.compares.append(body)
            project = body["project_name"]
            if project not in self.projects:
                return {
                    "success": False,
                    "message": f"project <{project}> not found in current database",
                    "project_name": project,
                    "compare_result": [],
                }
            return {
                "success": True,
                "message": "ok",
                "project_name": project,
                "compare_result": self.compare_result,
            }

        @app.delete("/project/{project_name}")
        async def delete_project(project_name: str):
            self.deleted.append(project_name)
            if project_name not in self.projects:
                return JSONResponse(
                    {"message": f"project <{project_name}> does not exist"},
                    status_code=404,
                )
            self.projects.discard(project_name)
            return {"success": True, "message": f"project <{project_name}> deleted"}

        return app

    def transport(self) -> httpx.ASGITransport:
        return httpx.ASGITransport(app=self.app)


def make_png(path: Path, size: tuple[int, int] = (8, 7), color: str = "red") -> Path:
    """Create a minimal PNG test image on disk."""
    img = Image.new("RGB", size, color=color)
    img.save(path, "PNG")
    return path


def refuse_connection(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("[Errno 111] Connection refused", request=request)


@pytest.fixture()
def fake_server() -> FakeVismatchServer:
    return FakeVismatchServer()


@pytest.fixture()
async def api_client(fake_server: FakeVismatchServer) -> ApiClient:
    """ApiClient wired to the fake server through an ASGI transport."""
    client = ApiClient(BASE_URL, transport=fake_server.transport())
    yield client
    await client.aclose()


@pytest.fixture()
async def unreachable_client() -> ApiClient:
    """ApiClient whose every request fails to connect."""
    client = ApiClient(BASE_URL, transport=httpx.MockTransport(refuse_connection))
    yield client
    await client.aclose()


@pytest.fixture()
def codec() -> Codec:
    return Codec()


@pytest.fixture()
def image_files(tmp_path: Path) -> list[str]:
    """Three small PNGs named a.png, b.png, c.png."""
    return [
        str(make_png(tmp_path / name, color=color))
        for name, color in (("a.png", "red"), ("b.png", "green"), ("c.png", "blue"))
    ]
