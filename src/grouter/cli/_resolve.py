"""Resolve ``"module:attribute"`` strings to a Router or Dispatcher."""

import importlib

from grouter.routing.dispatcher import Dispatcher
from grouter.routing.router import Router


def resolve_app(import_string: str) -> Router | Dispatcher:
    """Import and return the Router or Dispatcher named by *import_string*.

    When the attribute part is omitted it defaults to ``router``
    (``"myapp"`` resolves to ``myapp.router``). A zero-argument factory
    returning either type is called.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the object is neither a Router, a Dispatcher, nor a
            factory producing one.
    """
    module_path, _, attr_name = import_string.partition(":")
    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name or "router")

    if callable(obj) and not isinstance(obj, Router | Dispatcher):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, Router | Dispatcher):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a grouter Router"
        raise TypeError(msg)
    return obj
