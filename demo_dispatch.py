#!/usr/bin/env python3
"""
Demo: Compile the example DSL, list routes, dispatch requests, and
reconstruct the structured argument from the response.
"""

import logging

from metadsl.examples import build_example_compiler
from metadsl.dispatch import dispatch
from metadsl.serialization import description_to_yaml, reconstruct_arguments


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    compiler = build_example_compiler()

    print("=" * 80)
    print("DISPATCH DEMO")
    print("=" * 80)

    print("\n1. ROUTES")
    for route in compiler.export_routes():
        print(f"   {route.method:<5} {route.path:<28} -> {route.handler.id}")

    print("\n2. GET /greet?name=Alice")
    response = dispatch(compiler, "/greet", "GET", {"name": "Alice"})
    print(f"   {response.status} {response.to_json()}")

    print("\n3. POST /api_v1/greet_person")
    payload = {"person": {"name": "Alice", "age": 30}}
    response = dispatch(compiler, "/api_v1/greet_person", "POST", payload)
    print(f"   {response.status} {response.to_json()}")

    if response.ok:
        rebuilt = reconstruct_arguments(response.body["result"])
        print("\n4. RECONSTRUCTED ARGUMENTS")
        for name, value in rebuilt.items():
            print(f"   {name}: {value.to_dict() if hasattr(value, 'to_dict') else value}")

    print("\n5. UNKNOWN PATH")
    response = dispatch(compiler, "/nope", "GET")
    print(f"   {response.status} {response.to_json()}")

    print("\n6. DESCRIPTION OF 'alice' (YAML)")
    print(description_to_yaml(compiler.describe_object("alice")))


if __name__ == "__main__":
    main()
