"""
Route Exporter.

Scans registry objects for an `api` tag plus a `path:<value>` tag and
produces the (path, method, handler) table consumed by a dispatcher.

Routes are derived, never stored: every export recomputes them from the
current tags.
"""

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Union

from .model import MetaObject

API_TAG = "api"
POST_TAG = "post"
PATH_PREFIX = "path:"


@dataclass(frozen=True)
class Route:
    """
    One exported operation.

    Properties:
        path: Request path, e.g. "/greet"
        method: "GET" or "POST"
        handler: The tagged MetaObject
    """

    path: str
    method: str
    handler: MetaObject


def route_path(obj: MetaObject) -> Optional[str]:
    """Value of the first `path:` tag, or None."""
    for t in obj.tags:
        if t.startswith(PATH_PREFIX):
            return t.split(":", 1)[1]
    return None


def export_routes(objects: Union[Mapping[str, MetaObject], Iterable[MetaObject]]) -> List[Route]:
    """
    Build the route table.

    Args:
        objects: Registry mapping (id -> MetaObject) or an iterable of objects

    Returns:
        One Route per object tagged both `api` and `path:<x>`, in registry
        order. Method is POST if the object is tagged `post`, else GET.
    """
    if isinstance(objects, Mapping):
        objects = objects.values()

    routes = []
    for obj in objects:
        if not obj.has_tag(API_TAG):
            continue
        path = route_path(obj)
        if path is None:
            continue
        method = "POST" if obj.has_tag(POST_TAG) else "GET"
        routes.append(Route(path=path, method=method, handler=obj))
    return routes


__all__ = ["Route", "route_path", "export_routes"]
