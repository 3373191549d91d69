import json

import pytest
from aiohttp import web
from aiohttp import test_utils

from chapter_quiz.errors import LoadError
from chapter_quiz.services.content_service import ContentRepository
from chapter_quiz.services.content_source import HttpContentSource

from tests.conftest import INTRO, SHELL


async def _serve(routes: dict) -> test_utils.TestServer:
    """Start a local server where each path maps to a JSON body or an HTTP status."""
    async def handler(request: web.Request) -> web.Response:
        body = routes.get(request.path, 404)
        if isinstance(body, int):
            return web.Response(status=body)
        # served as text/plain, the way static hosts often serve .json
        return web.Response(text=json.dumps(body), content_type="text/plain")

    app = web.Application()
    app.router.add_get("/{tail:.*}", handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    return server


@pytest.mark.asyncio
async def test_http_source_loads_chapters():
    server = await _serve({
        "/chapters.json": ["intro.json", "shell.json"],
        "/chapters/intro.json": [INTRO],
        "/chapters/shell.json": SHELL,
    })
    try:
        source = HttpContentSource(str(server.make_url("/")))

        assert await source.fetch_index() == ["intro.json", "shell.json"]
        assert await source.fetch_chapter("shell.json") == SHELL
    finally:
        await server.close()


@pytest.mark.asyncio
async def test_http_missing_index_is_fatal(ledger):
    server = await _serve({"/chapters/intro.json": [INTRO]})
    try:
        repository = ContentRepository(HttpContentSource(str(server.make_url("/"))), ledger)

        with pytest.raises(LoadError):
            await repository.load()
        assert repository.chapters == []
    finally:
        await server.close()


@pytest.mark.asyncio
async def test_http_failed_chapter_is_dropped(ledger):
    server = await _serve({
        "/chapters.json": ["intro.json", "broken.json", "gone.json", "shell.json"],
        "/chapters/intro.json": [INTRO],
        "/chapters/broken.json": 500,
        "/chapters/shell.json": SHELL,
    })
    try:
        repository = ContentRepository(HttpContentSource(str(server.make_url("/"))), ledger)

        chapters = await repository.load()

        assert [c.name for c in chapters] == ["Intro", "Shell basics"]
        assert sorted(w.identifier for w in repository.warnings) == ["broken.json", "gone.json"]
    finally:
        await server.close()
