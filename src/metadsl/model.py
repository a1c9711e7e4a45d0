"""
Core Meta-Object Model

Defines the fundamental data structures of the Meta DSL engine.

These are plain data classes representing:
    - MetaVars (named, typed, mutable value cells)
    - MetaObjects (registry entries: value, operations, relations, tags)
    - Method entries (NativeClosure or ObjectReference)

ARCHITECTURAL RULE:
    describe() output is a pure function of current state.
    Everything reachable through `value` or `relations` is described
    recursively, so a consumer can rebuild the structure from the
    description alone.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from .errors import InvocationError, OperationNotFoundError

EXECUTE = "execute"
FIELD = "field"


@dataclass
class MetaVar:
    """
    A named, typed, mutable value cell.

    Properties:
        name: Identifier, unique within its owning scope
        value: Scalar, sequence, mapping, or nested MetaObject
        type: Free-form type tag (descriptive only, never enforced)

    A MetaVar is owned by exactly one MetaObject's relation list, or
    exists transiently as a call argument.
    """

    name: str
    value: Any = None
    type: str = "mixed"

    def get(self) -> Any:
        return self.value

    def set(self, value: Any) -> None:
        self.value = value

    def describe(self) -> Dict[str, Any]:
        return {"name": self.name, "value": describe_value(self.value), "type": self.type}

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class NativeClosure:
    """
    An executable operation plus its declared parameter names.

    The parameter list is captured when the closure is created, so the
    argument binder never has to introspect the function itself.

    Calling a NativeClosure unwraps MetaVar arguments to their values.

    Properties:
        fn: The Python callable
        params: Declared parameter names, in positional order
        source: Generated source text (arrow definitions only)
    """

    fn: Callable[..., Any]
    params: Tuple[str, ...] = ()
    source: Optional[str] = None

    def __call__(self, *args: Any) -> Any:
        return self.fn(*(arg.value if isinstance(arg, MetaVar) else arg for arg in args))


@dataclass(frozen=True)
class ObjectReference:
    """An operation entry that delegates to another MetaObject."""

    target: "MetaObject"


Method = Union[NativeClosure, ObjectReference]


@dataclass
class MetaObject:
    """
    A named entity in the registry.

    Properties:
        id:
            Unique key in the registry (re-declaring overwrites)

        type:
            "value", "function", "abstract-object", or "generic"
            for hand-built objects

        value:
            Payload for value-type objects

        methods:
            Operation name -> NativeClosure | ObjectReference
            "execute" is the primary entry point for callables

        relations:
            Relation kind -> ordered list of related entities
            The "field" kind holds MetaVars modelling record members

        tags:
            Insertion-ordered, no duplicates

    Example:
        obj = MetaObject("person", "abstract-object")
        obj.relate("field", MetaVar("name", "Alice"))
        obj.get("name")  # -> "Alice"
    """

    id: str
    type: str = "generic"
    value: Any = None
    methods: Dict[str, Method] = field(default_factory=dict)
    relations: Dict[str, List[Any]] = field(default_factory=dict)
    tags: List[str] = field(default_factory=list)

    def tag(self, *tags: str) -> None:
        for t in tags:
            if t not in self.tags:
                self.tags.append(t)

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def add_method(self, name: str, method: Any, params: Tuple[str, ...] = ()) -> None:
        """
        Register an operation.

        Args:
            name: Operation name
            method: NativeClosure, ObjectReference, MetaObject (wrapped as
                a reference) or a plain callable (wrapped as a closure)
            params: Declared parameter names for a plain callable
        """
        if isinstance(method, (NativeClosure, ObjectReference)):
            self.methods[name] = method
        elif isinstance(method, MetaObject):
            self.methods[name] = ObjectReference(method)
        elif callable(method):
            self.methods[name] = NativeClosure(method, tuple(params))
        else:
            raise TypeError(f"Method '{name}' must be callable or a MetaObject, got {type(method)}")

    def relate(self, kind: str, entity: Any) -> None:
        self.relations.setdefault(kind, []).append(entity)

    def get(self, key: str) -> Any:
        """
        Retrieve a field value by name.

        Returns:
            The value of the "field" MetaVar named `key`, or None
        """
        for member in self.relations.get(FIELD, []):
            if isinstance(member, MetaVar) and member.name == key:
                return member.get()
        return None

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def bind(self, other: "MetaObject") -> "MetaObject":
        """Merge another object's operations and tags into this one."""
        for name, method in other.methods.items():
            self.methods[name] = method
        self.tag(*other.tags)
        return self

    def call(self, name: str, *args: Any) -> Any:
        """
        Invoke an operation positionally.

        For "execute" the result is wrapped together with a description of
        every argument, so the caller can reconstruct what was passed:

            {"result": ..., "vars": [...]}

        Raises:
            OperationNotFoundError: No callable entry under `name`
            InvocationError: The operation body raised
        """
        method = self.methods.get(name)

        if isinstance(method, NativeClosure):
            try:
                result = method(*args)
            except Exception as e:
                raise InvocationError(self.id, name, e) from e
            if name == EXECUTE:
                return {"result": result, "vars": [describe_value(arg) for arg in args]}
            return result

        if isinstance(method, ObjectReference) and EXECUTE in method.target.methods:
            return method.target.call(EXECUTE, *args)

        raise OperationNotFoundError(self.id, name)

    def describe(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "tags": list(self.tags),
            "methods": list(self.methods.keys()),
            "relations": {
                kind: [describe_value(entity) for entity in entities]
                for kind, entities in self.relations.items()
            },
            "value": describe_value(self.value),
        }

    def __str__(self) -> str:
        return json.dumps(self.describe(), indent=2, default=str)


def describe_value(value: Any) -> Any:
    """Describe a value, recursing into MetaVars, MetaObjects and containers."""
    if isinstance(value, (MetaVar, MetaObject)):
        return value.describe()
    if isinstance(value, list):
        return [describe_value(v) for v in value]
    if isinstance(value, tuple):
        return tuple(describe_value(v) for v in value)
    if isinstance(value, dict):
        return {k: describe_value(v) for k, v in value.items()}
    return value
