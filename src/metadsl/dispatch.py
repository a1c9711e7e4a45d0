"""
Request dispatcher.

Framework-free glue between a web layer and a compiled registry:
match path + method against the exported routes, bind the inbound
parameters, invoke `execute` and shape the outcome as a Response.

    200  {"status": "ok", "result": {"result": ..., "vars": [...]}}
    404  {"error": "Not Found"}
    500  {"error": "<underlying message>"}
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .compiler import MetaCompiler
from .errors import MetaDSLError
from .model import EXECUTE, describe_value

logger = logging.getLogger(__name__)

RESERVED_PARAMS = ("path",)


@dataclass
class Response:
    """Status code plus a JSON-ready body."""
    status: int
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == 200

    def to_json(self) -> str:
        return json.dumps(describe_value(self.body), default=str)


def dispatch(
    compiler: MetaCompiler,
    path: str,
    method: str,
    params: Optional[Mapping[str, Any]] = None,
) -> Response:
    """
    Handle one request against `compiler`'s routes.

    Args:
        compiler: A compiled MetaCompiler
        path: Request path, e.g. "/greet"
        method: HTTP method (case-insensitive)
        params: Query parameters (GET) or decoded JSON body (POST)

    Returns:
        Response. Invocation and binding failures become 500s; an
        unmatched path + method becomes a 404. First matching route wins.
    """
    method = method.upper()
    params = {k: v for k, v in (params or {}).items() if k not in RESERVED_PARAMS}

    for route in compiler.export_routes():
        if route.path != path or route.method != method:
            continue
        handler = route.handler
        try:
            args = compiler.arguments_for(handler, params, source_type=method.lower())
            result = handler.call(EXECUTE, *args)
        except MetaDSLError as e:
            logger.error("%s %s failed: %s", method, path, e)
            return Response(500, {"error": str(e)})
        return Response(200, {"status": "ok", "result": result})

    return Response(404, {"error": "Not Found"})


__all__ = ["Response", "dispatch"]
