"""
Description protocol: encodings and reconstruction.

The producer side calls MetaObject.describe(); this module moves those
descriptions over the wire (JSON / YAML) and rebuilds a structured
AbstractObject from them on the consumer side.

A description can only be reconstructed if it carries `relations.field`.
Anything else is reported with ReconstructionError, never defaulted.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict

import yaml

from metadsl.errors import ReconstructionError
from metadsl.model import FIELD, MetaVar, describe_value

ABSTRACT_OBJECT = "abstract-object"


@dataclass
class AbstractObject:
    """
    Consumer-side structured object rebuilt from a description.

    Properties:
        id: Object id from the description
        fields: Field name -> MetaVar, in description order
    """

    id: str
    fields: Dict[str, MetaVar] = field(default_factory=dict)

    def add_var(self, name: str, value: Any, type: str = "mixed") -> AbstractObject:
        self.fields[name] = MetaVar(name, value, type)
        return self

    def get(self, name: str) -> Any:
        var = self.fields.get(name)
        return var.get() if var is not None else None

    def set(self, name: str, value: Any) -> None:
        if name in self.fields:
            self.fields[name].set(value)

    def to_dict(self) -> Dict[str, Any]:
        """Plain nested mapping of field values."""
        return {
            name: var.value.to_dict() if isinstance(var.value, AbstractObject) else var.value
            for name, var in self.fields.items()
        }

    def describe(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "fields": {
                name: {
                    "name": var.name,
                    "value": var.value.describe() if isinstance(var.value, AbstractObject) else var.value,
                    "type": var.type,
                }
                for name, var in self.fields.items()
            },
        }


def _is_object_description(d: Any) -> bool:
    return isinstance(d, dict) and d.get("type") == ABSTRACT_OBJECT and "relations" in d


def _reconstruct_fields(obj: AbstractObject, members: Any) -> AbstractObject:
    if not isinstance(members, list):
        raise ReconstructionError(f"relations.field of '{obj.id}' is not a list")
    for member in members:
        if isinstance(member, dict) and "name" in member:
            value = member.get("value")
            if _is_object_description(value):
                nested = AbstractObject(str(value.get("id", member["name"])))
                value = _reconstruct_fields(nested, value["relations"].get(FIELD, []))
            obj.add_var(member["name"], value, member.get("type", "mixed"))
        elif isinstance(member, str):
            obj.add_var(member, None)
        else:
            raise ReconstructionError(f"Unrecognized field entry in '{obj.id}': {member!r}")
    return obj


def reconstruct(description: Dict[str, Any]) -> AbstractObject:
    """
    Rebuild a structured object from a MetaObject description.

    Each field entry contributes its name, value and type. A field whose
    value is itself an abstract-object description is rebuilt recursively.

    Raises:
        ReconstructionError: If the description has no id or no
            relations.field
    """
    if not isinstance(description, dict) or not description.get("id"):
        raise ReconstructionError("Cannot reconstruct: description has no id")
    relations = description.get("relations")
    if not isinstance(relations, dict) or FIELD not in relations:
        raise ReconstructionError(
            f"Cannot reconstruct '{description['id']}': missing relations.field info"
        )
    return _reconstruct_fields(AbstractObject(str(description["id"])), relations[FIELD])


def reconstruct_arguments(call_result: Dict[str, Any]) -> Dict[str, Any]:
    """
    Rebuild the structured arguments of an `execute` call result.

    Returns:
        Argument name -> AbstractObject for object arguments, or the plain
        value for scalar arguments
    """
    rebuilt: Dict[str, Any] = {}
    for var in call_result.get("vars", []):
        value = var.get("value")
        rebuilt[var["name"]] = reconstruct(value) if _is_object_description(value) else value
    return rebuilt


def description_to_json(d: Any) -> str:
    return json.dumps(describe_value(d), sort_keys=True)


def description_from_json(s: str) -> Any:
    return json.loads(s)


def description_to_yaml(d: Any) -> str:
    return yaml.safe_dump(json.loads(description_to_json(d)))


def description_from_yaml(s: str) -> Any:
    return yaml.safe_load(s)


def call_result_to_json(result: Dict[str, Any]) -> str:
    return json.dumps(describe_value(result), sort_keys=True, default=str)
