"""
Compiler configuration.

The debug flag and binding defaults live on a CompilerConfig instance that
is threaded through the compiler, never in module-level state.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

import yaml


@dataclass
class CompilerConfig:
    """
    Settings for one MetaCompiler instance.

    Properties:
        debug: Trace statements, generated closures and created objects
        source_type: Type tag given to MetaVars built by the argument binder
        reset_on_compile: Wipe the registry at the start of every compile()
    """

    debug: bool = False
    source_type: str = "mixed"
    reset_on_compile: bool = False


def config_from_dict(d: Optional[Dict[str, Any]]) -> CompilerConfig:
    """Build a CompilerConfig from a mapping, ignoring unknown keys."""
    if not d:
        return CompilerConfig()
    known = {f.name for f in fields(CompilerConfig)}
    return CompilerConfig(**{k: v for k, v in d.items() if k in known})


def load_config(filepath: str) -> CompilerConfig:
    """
    Load a CompilerConfig from a YAML file.

    Example file:
        debug: true
        source_type: get

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the document is not a mapping
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        d = yaml.safe_load(f)
    if d is not None and not isinstance(d, dict):
        raise ValueError(f"Config file must contain a mapping: {filepath}")
    return config_from_dict(d)
