from .common import Diagnostic, Diagnostics, IccCodegenError, ParseError
from .config import GeneratorConfig, NamespaceConfig, OutputLayout, load_config
from .parser import Argument, FunctionDescriptor, parse_functions_text
from .pipeline import GenerationResult, build_context, generate, run_generation, write_outputs
from .registry import FrozenRegistry, FunctionRegistry, SymbolTable

__version__ = "1.0.0"

__all__ = [
    "Argument",
    "Diagnostic",
    "Diagnostics",
    "FrozenRegistry",
    "FunctionDescriptor",
    "FunctionRegistry",
    "GenerationResult",
    "GeneratorConfig",
    "IccCodegenError",
    "NamespaceConfig",
    "OutputLayout",
    "ParseError",
    "SymbolTable",
    "build_context",
    "generate",
    "load_config",
    "parse_functions_text",
    "run_generation",
    "write_outputs",
]
