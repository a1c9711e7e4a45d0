"""
Example DSL program for proof-of-concept use.

Defines a greeting endpoint, a POST endpoint taking a structured person
record, a plain value, and a record built with `object(...)`.
"""
from typing import Optional

from metadsl.compiler import MetaCompiler
from metadsl.config import CompilerConfig


EXAMPLE_ROUTES_DSL = '''
let greet = (name) => "hi " + name;
tag greet as api, path:/greet;

let greet_person = (person) => {
    name = person["name"]
    age = person["age"]
    return f"Hello {name}, you are {age}"
}
tag greet_person as api, post, path:/api_v1/greet_person;

let version = "0.1.0";
tag version as meta;

let alice = object(name: "Alice", age: 30);
'''


def build_example_compiler(config: Optional[CompilerConfig] = None) -> MetaCompiler:
    compiler = MetaCompiler(config)
    compiler.compile(EXAMPLE_ROUTES_DSL)
    return compiler
