"""
Meta DSL Engine Package

Declaratively define named meta-objects (values, records, callables), tag
them, and expose tagged callables as invocable operations.

Layers:
    1. segmenter    DSL text → statements
    2. compiler     statements → MetaObject registry (translator for arrows)
    3. routes       registry → route table
    4. binder       external input → ordered MetaVar arguments
    5. dispatch     route match + bind + execute → Response

ARCHITECTURAL GUARANTEE:
------------------------
Every MetaObject can be described as plain data and every described
record can be reconstructed from that data alone (see serialization).
"""

__version__ = "0.1.0"
