"""HTTP primitives: immutable Request, chainable Response, headers, query."""

from grouter.http.headers import Headers
from grouter.http.query import QueryParams
from grouter.http.request import Request
from grouter.http.response import Redirect, Response

__all__ = ["Headers", "QueryParams", "Redirect", "Request", "Response"]
