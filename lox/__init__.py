from lox.lox_runtime import ScriptRunner, ExecutionResult, lox_native
from lox.lox_diagnostics import Diagnostics
from lox.lox_scanner import scan
from lox.lox_parser import parse
from lox.lox_resolver import resolve
from lox.lox_interpreter import Interpreter

__all__ = [
    "ScriptRunner", "ExecutionResult", "lox_native", "Diagnostics",
    "scan", "parse", "resolve", "Interpreter",
]
