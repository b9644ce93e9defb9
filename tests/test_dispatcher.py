"""End-to-end tests: Router -> Dispatcher -> ASGI, driven by TestClient."""

from typing import Any

import pytest

from grouter.config import RouterConfig
from grouter.errors import HTTPError, NotFound
from grouter.http.request import Request
from grouter.http.response import Redirect, Response
from grouter.routing.router import Router
from grouter.testing import TestClient


@pytest.fixture
def router() -> Router:
    router = Router()
    router.get("/ping").do(lambda: "pong")
    return router


class TestBasicDispatch:
    async def test_ping(self, router: Router) -> None:
        async with TestClient(router) as client:
            response = await client.get("/ping")
        assert response.status == 200
        assert response.text == "pong"
        assert response.content_type == "text/plain; charset=utf-8"

    async def test_unknown_path_is_404(self, router: Router) -> None:
        async with TestClient(router) as client:
            response = await client.get("/pong")
        assert response.status == 404
        assert response.text == "No route matches GET '/pong'"

    async def test_trailing_slash_is_insignificant(self, router: Router) -> None:
        async with TestClient(router) as client:
            assert (await client.get("/ping/")).status == 200

    async def test_wrong_method_is_405_with_allow(self, router: Router) -> None:
        router.post("/ping").do(lambda: "posted")
        async with TestClient(router) as client:
            response = await client.delete("/ping")
        assert response.status == 405
        assert response.header("allow") == "GET, HEAD, POST"

    async def test_head_falls_back_to_get(self, router: Router) -> None:
        async with TestClient(router) as client:
            response = await client.head("/ping")
        assert response.status == 200
        assert response.body == b""
        assert response.header("content-length") == "4"

    async def test_head_fallback_disabled(self) -> None:
        router = Router(config=RouterConfig(head_from_get=False))
        router.get("/ping").do(lambda: "pong")
        async with TestClient(router) as client:
            assert (await client.head("/ping")).status == 405

    async def test_query_string_does_not_affect_routing(self, router: Router) -> None:
        router.get("/search").do(lambda request: request.query.get("q", ""))
        async with TestClient(router) as client:
            response = await client.get("/search?q=grouter")
        assert response.text == "grouter"

    async def test_dispatch_in_process(self, router: Router, make_request: Any) -> None:
        response = await router.compile().dispatch(make_request("GET", "/ping"))
        assert response.text == "pong"


class TestPathParams:
    async def test_params_passed_as_kwargs(self) -> None:
        router = Router("/users")

        def show(id: int, request: Request) -> dict[str, Any]:
            return {"id": id, "path": request.path}

        router.get("/{id:int}").do(show)
        async with TestClient(router) as client:
            response = await client.get("/users/42")
        assert response.json() == {"id": 42, "path": "/users/42"}

    async def test_params_on_request(self) -> None:
        router = Router()
        router.get("/files/{rest...}").do(lambda request: request.path_params["rest"])
        async with TestClient(router) as client:
            response = await client.get("/files/a/b/c.txt")
        assert response.text == "a/b/c.txt"

    async def test_typed_param_rejects_mismatch(self) -> None:
        router = Router()
        router.get("/items/{n:int}").do(lambda n: str(n))
        async with TestClient(router) as client:
            assert (await client.get("/items/abc")).status == 404
            assert (await client.get("/items/7")).text == "7"

    async def test_static_route_of_other_method_does_not_hide_param(self) -> None:
        router = Router()
        router.post("/users/me").do(lambda: "updated me")
        router.get("/users/{id}").do(lambda id: f"user {id}")
        async with TestClient(router) as client:
            response = await client.get("/users/me")
        assert response.status == 200
        assert response.text == "user me"

    async def test_static_segment_wins_over_param(self) -> None:
        router = Router()
        router.get("/users/me").do(lambda: "me")
        router.get("/users/{name}").do(lambda name: f"user {name}")
        async with TestClient(router) as client:
            assert (await client.get("/users/me")).text == "me"
            assert (await client.get("/users/ada")).text == "user ada"


class TestReturnValues:
    async def test_json(self) -> None:
        router = Router()
        router.post("/echo").do_func(_echo)
        async with TestClient(router) as client:
            response = await client.post("/echo", json={"a": 1})
        assert response.status == 201
        assert response.content_type == "application/json"
        assert response.json() == {"received": {"a": 1}}

    async def test_redirect(self) -> None:
        router = Router()
        router.get("/old").do(lambda: Redirect("/new", status=301))
        async with TestClient(router) as client:
            response = await client.get("/old")
        assert response.status == 301
        assert response.header("location") == "/new"

    async def test_none_is_204(self) -> None:
        router = Router()
        router.delete("/x").do(lambda: None)
        async with TestClient(router) as client:
            response = await client.delete("/x")
        assert response.status == 204
        assert response.body == b""

    async def test_callable_object_handler(self) -> None:
        class Greeter:
            def __call__(self, request: Request) -> Response:
                return Response("hi").with_header("X-Greeter", "yes")

        router = Router()
        router.get("/hi").do(Greeter())
        async with TestClient(router) as client:
            response = await client.get("/hi")
        assert response.text == "hi"
        assert response.header("x-greeter") == "yes"

    async def test_cookies_are_sent(self) -> None:
        router = Router()
        router.get("/login").do(lambda: Response("ok").with_cookie("sid", "abc"))
        async with TestClient(router) as client:
            response = await client.get("/login")
        assert response.header("set-cookie").startswith("sid=abc")


async def _echo(request: Request) -> tuple[dict[str, Any], int]:
    return {"received": await request.json()}, 201


class TestErrors:
    async def test_http_error_from_handler(self) -> None:
        def teapot() -> None:
            raise HTTPError(418, "I'm a teapot")

        router = Router()
        router.get("/tea").do(teapot)
        async with TestClient(router) as client:
            response = await client.get("/tea")
        assert response.status == 418
        assert response.text == "I'm a teapot"

    async def test_unhandled_exception_is_500(self, caplog: pytest.LogCaptureFixture) -> None:
        def boom() -> None:
            raise RuntimeError("kaboom")

        router = Router()
        router.get("/boom").do(boom)
        async with TestClient(router) as client:
            response = await client.get("/boom")
        assert response.status == 500
        assert response.text == "Internal Server Error"
        assert "kaboom" in caplog.text

    async def test_debug_shows_traceback(self) -> None:
        def boom() -> None:
            raise RuntimeError("kaboom")

        router = Router(config=RouterConfig(debug=True))
        router.get("/boom").do(boom)
        async with TestClient(router) as client:
            response = await client.get("/boom")
        assert response.status == 500
        assert "RuntimeError: kaboom" in response.text

    async def test_status_error_handler(self, router: Router) -> None:
        @router.error(404)
        def not_found(request: Request) -> dict[str, str]:
            return {"missing": request.path}

        async with TestClient(router) as client:
            response = await client.get("/nowhere")
        assert response.status == 404
        assert response.json() == {"missing": "/nowhere"}

    async def test_exception_type_handler(self, router: Router) -> None:
        class Unauthorized(Exception):
            pass

        def secret() -> None:
            raise Unauthorized

        router.get("/secret").do(secret)

        @router.error(Unauthorized)
        def handle(request: Request, exc: Exception) -> tuple[str, int]:
            return type(exc).__name__, 401

        async with TestClient(router) as client:
            response = await client.get("/secret")
        assert response.status == 401
        assert response.text == "Unauthorized"

    async def test_exception_class_beats_status(self, router: Router) -> None:
        router.error(404)(lambda: "by status")
        router.error(NotFound)(lambda: "by class")
        async with TestClient(router) as client:
            assert (await client.get("/nowhere")).text == "by class"

    async def test_middleware_sees_handler_errors(self) -> None:
        seen: list[str] = []

        async def guard(request: Request, next: Any) -> Response:
            try:
                return await next(request)
            except ValueError as exc:
                seen.append(str(exc))
                return Response("recovered", status=400)

        def bad() -> None:
            raise ValueError("bad input")

        router = Router("/", guard)
        router.get("/bad").do(bad)
        async with TestClient(router) as client:
            response = await client.get("/bad")
        assert response.status == 400
        assert seen == ["bad input"]

    async def test_not_found_skips_middleware(self) -> None:
        seen: list[str] = []

        async def mw(request: Request, next: Any) -> Response:
            seen.append(request.path)
            return await next(request)

        router = Router("/", mw)
        router.get("/x").do(lambda: "x")
        async with TestClient(router) as client:
            await client.get("/y")
        assert seen == []


class TestAsgi:
    async def test_lifespan(self, router: Router) -> None:
        messages = iter([{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}])
        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return next(messages)

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        await router({"type": "lifespan"}, receive, send)
        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]

    async def test_router_call_compiles(self, router: Router) -> None:
        assert not router.compiled
        async with TestClient(router) as client:
            await client.get("/ping")
        assert router.compiled

    async def test_websocket_scope_ignored(self, router: Router) -> None:
        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return {"type": "websocket.connect"}

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        await router.compile()({"type": "websocket", "path": "/ping"}, receive, send)
        assert sent == []
