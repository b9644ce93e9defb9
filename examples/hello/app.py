"""Hello World, the smallest grouter app.

Demonstrates method shorthands, path parameters, return-value
negotiation, Response chaining, and a custom 404 handler.

Run:
    python app.py
"""

from grouter import Request, Response, Router

router = Router()

router.get("/").do(lambda: "Hello, World!")
router.get("/ping").do(lambda: "pong")


@router.get("/greet/{name}").do_func
def greet(name: str):
    return f"Hello, {name}!"


@router.get_head("/api/status").do_func
def status():
    return {"status": "ok"}


@router.post("/custom").do_func
def custom():
    return Response("Created").with_status(201).with_header("X-Custom", "grouter")


@router.error(404)
def not_found(request: Request):
    return f"Nothing at {request.path}"


if __name__ == "__main__":
    router.run()
