"""Pytest configuration and fixtures."""

import asyncio
from contextlib import asynccontextmanager

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer


async def _ping(request):
    return web.json_response({"status": "ok"})


async def _get_user(request):
    user_id = int(request.match_info["user_id"])
    if user_id != 1:
        return web.json_response({"error": "not found"}, status=404)
    return web.json_response({"id": 1, "name": "Ada", "role": "admin"})


async def _create_user(request):
    data = await request.json()
    return web.json_response({"id": 2, **data}, status=201)


async def _update_user(request):
    data = await request.json()
    return web.json_response({"id": int(request.match_info["user_id"]), **data})


async def _delete_user(request):
    return web.Response(status=204)


async def _echo_headers(request):
    return web.json_response({"token": request.headers.get("X-Token")})


async def _text(request):
    return web.Response(text="plain body")


async def _image(request):
    return web.Response(body=b"\xff\xd8\xff\xe0binary", content_type="image/jpeg")


async def _slow(request):
    await asyncio.sleep(1)
    return web.json_response({"status": "late"})


def create_stub_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/ping", _ping)
    app.router.add_get("/users/{user_id}", _get_user)
    app.router.add_post("/users", _create_user)
    app.router.add_put("/users/{user_id}", _update_user)
    app.router.add_delete("/users/{user_id}", _delete_user)
    app.router.add_get("/headers", _echo_headers)
    app.router.add_get("/text", _text)
    app.router.add_get("/img", _image)
    app.router.add_get("/slow", _slow)
    return app


@asynccontextmanager
async def _serve():
    async with TestServer(create_stub_app(), host="127.0.0.1") as server:
        yield f"http://127.0.0.1:{server.port}"


@pytest.fixture
def stub_server():
    """Async context manager yielding the base URL of a stub API."""
    return _serve


@pytest.fixture
def temp_project(tmp_path):
    """Create a temporary project directory with .env file."""
    env_file = tmp_path / ".env"
    env_file.write_text("API_URL=http://example.test\nAPI_KEY=secret\n")
    return tmp_path


@pytest.fixture
def sample_feature():
    """Feature text exercising doc-strings and data tables."""
    return '''Feature: Users API

  Scenario: Fetch a user
    Given I set header "X-Token" to "abc"
    When I send a GET request to "/users/1"
    Then the response status code should be 200
    And the response should have the following data:
      | name | Ada   |
      | role | admin |

  Scenario: Create a user
    When I send a POST request to "/users" with:
      """
      {"name": "Grace"}
      """
    Then the response status code should be 201
    And the response should contain "name" with value "Grace"
'''
