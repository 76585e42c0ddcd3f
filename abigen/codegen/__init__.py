"""
abigen.codegen: type-directed Python code generation.

    types       token -> annotation / serde expression
    structs     @dataclass per struct
    enums       tagged variant classes, event conversion
    functions   view / external methods per surface and execution version
    generator   module assembly (CodeGenerator)
"""

from .generator import CodeGenerator, flatten_functions
from .types import TypeProjector, path_for_serde

__all__ = ["CodeGenerator", "TypeProjector", "flatten_functions", "path_for_serde"]
