"""
Argument Binder.

Maps an external key/value input set onto a callable's declared
parameters, producing one MetaVar per parameter in declared order.

    params: ("person", "greeting")
    source: {"person": {"name": "Alice"}, "extra": 1}

Becomes:
    [
        MetaVar("person", MetaObject("person", "abstract-object",
                relations={"field": [MetaVar("name", "Alice")]})),
        MetaVar("greeting", None),
    ]

Rules:
    - Order is the declared order; it is positional-call order.
    - Mapping values become nested "abstract-object" MetaObjects whose
      "field" relations are MetaVars, recursing for deeper nesting.
      An empty mapping still carries an empty "field" relation.
    - Missing keys bind to None. Absence is not a binding failure.
    - Keys not declared as parameters are ignored.
"""

from collections.abc import Mapping
from typing import Any, List, Sequence

from .model import EXECUTE, FIELD, MetaObject, MetaVar, NativeClosure, ObjectReference


def build_meta_object(name: str, values: Mapping, source_type: str = "mixed") -> MetaObject:
    """
    Recursively materialize a mapping as an "abstract-object" MetaObject.

    Args:
        name: Id of the new object
        values: Field name -> value (mappings recurse)
        source_type: Type tag for every MetaVar created

    Returns:
        MetaObject with one "field" MetaVar per key, in mapping order
    """
    obj = MetaObject(name, "abstract-object", relations={FIELD: []})
    for key, value in values.items():
        key = str(key)
        obj.relate(FIELD, MetaVar(key, _bind_value(key, value, source_type), source_type))
    return obj


def _bind_value(name: str, value: Any, source_type: str) -> Any:
    if isinstance(value, Mapping):
        return build_meta_object(name, value, source_type)
    return value


def bind_arguments(params: Sequence[str], source: Mapping, source_type: str = "mixed") -> List[MetaVar]:
    """
    Build the ordered argument list for a call.

    Args:
        params: Declared parameter names
        source: External name -> value mapping
        source_type: Type tag for every MetaVar created

    Returns:
        One MetaVar per parameter, in declared order
    """
    return [
        MetaVar(name, _bind_value(name, source.get(name), source_type), source_type)
        for name in params
    ]


def declared_params(obj: MetaObject, operation: str = EXECUTE) -> tuple:
    """
    Declared parameter names of an object's operation.

    Follows ObjectReferences to the target's "execute". Returns an empty
    tuple when there is nothing callable to bind against.
    """
    method = obj.methods.get(operation)
    seen = set()
    while isinstance(method, ObjectReference) and id(method.target) not in seen:
        seen.add(id(method.target))
        method = method.target.methods.get(EXECUTE)
    if isinstance(method, NativeClosure):
        return method.params
    return ()


def arguments_for(obj: MetaObject, source: Mapping, source_type: str = "mixed") -> List[MetaVar]:
    """Bind `source` against the declared parameters of `obj`'s execute operation."""
    return bind_arguments(declared_params(obj), source, source_type)


__all__ = ["build_meta_object", "bind_arguments", "declared_params", "arguments_for"]
