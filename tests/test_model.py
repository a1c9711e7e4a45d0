"""
Tests for Meta DSL Core Model Objects

These tests verify:
    - MetaVar get/set/describe
    - MetaObject tagging, methods, relations and binding
    - Invocation through call() for both method variants
    - Recursive, state-only descriptions
"""

import json

import pytest
from metadsl.model import (
    MetaVar,
    MetaObject,
    NativeClosure,
    ObjectReference,
    describe_value,
)
from metadsl.errors import InvocationError, OperationNotFoundError


class TestMetaVar:
    """Test MetaVar cells."""

    def test_default_type_is_mixed(self):
        var = MetaVar("x", 1)
        assert var.type == "mixed"

    def test_get_and_set(self):
        var = MetaVar("x", 1)
        var.set(2)
        assert var.get() == 2

    def test_str_is_value(self):
        assert str(MetaVar("name", "Alice")) == "Alice"

    def test_describe_scalar(self):
        var = MetaVar("age", 30, "get")
        assert var.describe() == {"name": "age", "value": 30, "type": "get"}

    def test_describe_nested_object(self):
        """A MetaObject value is described recursively."""
        inner = MetaObject("person", "abstract-object")
        inner.relate("field", MetaVar("name", "Alice"))
        desc = MetaVar("person", inner).describe()
        assert desc["value"]["id"] == "person"
        assert desc["value"]["relations"]["field"][0] == {
            "name": "name", "value": "Alice", "type": "mixed"
        }


class TestTagging:
    """Test MetaObject tag sets."""

    def test_tags_keep_insertion_order(self):
        obj = MetaObject("o")
        obj.tag("b", "a", "c")
        assert obj.tags == ["b", "a", "c"]

    def test_tagging_is_idempotent(self):
        obj = MetaObject("o")
        obj.tag("api")
        obj.tag("api", "api")
        assert obj.tags == ["api"]

    def test_has_tag(self):
        obj = MetaObject("o")
        obj.tag("post")
        assert obj.has_tag("post")
        assert not obj.has_tag("api")


class TestMethods:
    """Test method registration variants."""

    def test_plain_callable_becomes_closure(self):
        obj = MetaObject("o")
        obj.add_method("double", lambda x: x * 2, params=("x",))
        method = obj.methods["double"]
        assert isinstance(method, NativeClosure)
        assert method.params == ("x",)

    def test_meta_object_becomes_reference(self):
        target = MetaObject("t")
        obj = MetaObject("o")
        obj.add_method("execute", target)
        assert obj.methods["execute"] == ObjectReference(target)

    def test_non_callable_rejected(self):
        obj = MetaObject("o")
        with pytest.raises(TypeError):
            obj.add_method("bad", 42)

    def test_closure_unwraps_metavars(self):
        closure = NativeClosure(lambda a, b: a + b, ("a", "b"))
        assert closure(MetaVar("a", 1), 2) == 3


class TestRelations:
    """Test relations and field lookup."""

    def test_relate_appends_in_order(self):
        obj = MetaObject("o")
        obj.relate("field", MetaVar("a", 1))
        obj.relate("field", MetaVar("b", 2))
        assert [v.name for v in obj.relations["field"]] == ["a", "b"]

    def test_get_field(self):
        obj = MetaObject("o", "abstract-object")
        obj.relate("field", MetaVar("name", "Alice"))
        assert obj.get("name") == "Alice"
        assert obj["name"] == "Alice"

    def test_get_missing_field_is_none(self):
        obj = MetaObject("o")
        assert obj.get("nothing") is None

    def test_get_ignores_other_relation_kinds(self):
        obj = MetaObject("o")
        obj.relate("parent", MetaVar("name", "x"))
        assert obj.get("name") is None


class TestBind:
    """Test the bind combinator."""

    def test_bind_unions_methods_and_tags(self):
        a = MetaObject("a")
        a.tag("api")
        a.add_method("one", lambda: 1)
        b = MetaObject("b")
        b.tag("api", "post")
        b.add_method("two", lambda: 2)

        assert a.bind(b) is a
        assert set(a.methods) == {"one", "two"}
        assert a.tags == ["api", "post"]


class TestCall:
    """Test call() dispatch on method variants."""

    def test_execute_wraps_result_and_vars(self):
        obj = MetaObject("greet", "function")
        obj.add_method("execute", lambda name: "hi " + name, params=("name",))
        result = obj.call("execute", MetaVar("name", "Alice"))
        assert result == {
            "result": "hi Alice",
            "vars": [{"name": "name", "value": "Alice", "type": "mixed"}],
        }

    def test_other_operation_returns_raw_result(self):
        obj = MetaObject("o")
        obj.add_method("double", lambda x: x * 2, params=("x",))
        assert obj.call("double", 4) == 8

    def test_reference_delegates_to_target_execute(self):
        target = MetaObject("t", "function")
        target.add_method("execute", lambda x: x + 1, params=("x",))
        obj = MetaObject("o")
        obj.add_method("run", target)
        assert obj.call("run", 1)["result"] == 2

    def test_reference_without_execute_fails(self):
        obj = MetaObject("o")
        obj.add_method("run", MetaObject("t"))
        with pytest.raises(OperationNotFoundError):
            obj.call("run")

    def test_missing_operation(self):
        obj = MetaObject("o")
        with pytest.raises(OperationNotFoundError) as exc:
            obj.call("nope")
        assert exc.value.object_id == "o"
        assert exc.value.operation == "nope"
        assert "nope" in str(exc.value) and "'o'" in str(exc.value)

    def test_body_failure_becomes_invocation_error(self):
        obj = MetaObject("boom", "function")
        obj.add_method("execute", lambda: 1 / 0)
        with pytest.raises(InvocationError) as exc:
            obj.call("execute")
        assert "division by zero" in str(exc.value)
        assert isinstance(exc.value.__cause__, ZeroDivisionError)


class TestDescribe:
    """Test the structural description."""

    def test_describe_shape(self):
        obj = MetaObject("v", "value", 42)
        obj.tag("value")
        assert obj.describe() == {
            "id": "v",
            "type": "value",
            "tags": ["value"],
            "methods": [],
            "relations": {},
            "value": 42,
        }

    def test_describe_lists_method_names(self):
        obj = MetaObject("f", "function")
        obj.add_method("execute", lambda: None)
        assert obj.describe()["methods"] == ["execute"]

    def test_describe_is_pure(self):
        obj = MetaObject("o", "abstract-object")
        obj.relate("field", MetaVar("a", [1, 2]))
        assert obj.describe() == obj.describe()

    def test_describe_recurses_through_value_containers(self):
        inner = MetaObject("inner", "value", 1)
        obj = MetaObject("outer", "value", {"items": [inner]})
        assert obj.describe()["value"]["items"][0]["id"] == "inner"

    def test_raw_relation_values_pass_through(self):
        obj = MetaObject("o")
        obj.relate("note", "plain")
        assert obj.describe()["relations"]["note"] == ["plain"]

    def test_str_is_json(self):
        obj = MetaObject("v", "value", "x")
        assert json.loads(str(obj))["id"] == "v"

    def test_describe_value_keeps_tuples(self):
        assert describe_value((1, 2)) == (1, 2)
