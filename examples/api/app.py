"""Versioned JSON API built from nested sub-routers.

Demonstrates:
- ``add_sub_router()`` for path-prefix groups (``/api/v1/items``)
- Router middleware inherited by every route beneath it
- Route-local middleware with ``with_middleware()``
- Typed path parameters and JSON request bodies

Run:
    grouter run app:router
"""

import threading
from typing import Any

from grouter import NotFound, Request, Response, Router
from grouter.middleware import Next, RequestLogger

API_TOKEN = "s3cret"

_items: dict[int, dict[str, Any]] = {}
_next_id = 1
_lock = threading.Lock()


async def require_token(request: Request, next: Next) -> Response:
    """Reject requests without the bearer token."""
    if request.headers.get("authorization") != f"Bearer {API_TOKEN}":
        return Response("Unauthorized", status=401).with_header("WWW-Authenticate", "Bearer")
    return await next(request)


async def require_json(request: Request, next: Next) -> Response:
    if request.content_type != "application/json":
        return Response("Expected application/json", status=415)
    return await next(request)


router = Router("/", RequestLogger())
router.get("/health").do(lambda: {"status": "ok"})

v1 = router.add_sub_router("api").add_sub_router("v1").add_middlewares(require_token)


@v1.get("/items").do_func
def list_items():
    with _lock:
        return list(_items.values())


@v1.post("/items").with_middleware(require_json).do_func
async def create_item(request: Request):
    global _next_id
    payload = await request.json()
    with _lock:
        item = {"id": _next_id, "name": payload.get("name", "")}
        _items[_next_id] = item
        _next_id += 1
    return item, 201, {"Location": f"/api/v1/items/{item['id']}"}


@v1.get("/items/{item_id:int}").do_func
def show_item(item_id: int):
    with _lock:
        item = _items.get(item_id)
    if item is None:
        raise NotFound(f"No item {item_id}")
    return item


@v1.delete("/items/{item_id:int}").do_func
def delete_item(item_id: int):
    with _lock:
        if _items.pop(item_id, None) is None:
            raise NotFound(f"No item {item_id}")


@router.error(404)
def not_found(request: Request, exc: Exception):
    return {"error": str(exc), "path": request.path}


if __name__ == "__main__":
    router.run()
