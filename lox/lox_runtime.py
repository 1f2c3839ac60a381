"""
Script execution: runs source text through every stage of the pipeline
and packages the outcome for a driver.
"""
import inspect
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from lox.lox_datatypes import NativeFunction
from lox.lox_diagnostics import Diagnostic, Diagnostics
from lox.lox_interpreter import Interpreter
from lox.lox_parser import parse
from lox.lox_resolver import resolve
from lox.lox_scanner import scan


def lox_native(func):
    """A decorator to explicitly mark host methods as callable from Lox."""
    func._is_lox_native = True
    return func


@dataclass
class ExecutionResult:
    """The structured result of a script execution."""
    status: Literal['success', 'error']
    value: Any = None
    error_message: Optional[str] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)
    side_effects: List[Dict] = field(default_factory=list)

    @property
    def output(self) -> List[str]:
        """Lines written by `print`, in order."""
        return [e['message'] for e in self.side_effects if e.get('topics') == ['stdout']]

    @property
    def had_runtime_error(self) -> bool:
        return any(d.kind == 'runtime' for d in self.diagnostics)

    def format_error(self) -> str:
        if self.status != 'error':
            return ""
        return str(self.error_message or "Unknown error")


class ScriptRunner:
    """Scans, parses, resolves and executes Lox code.

    Globals persist between calls to `handle_script`, so a runner can back
    a REPL session one line at a time.
    """

    def __init__(self, host_object: Optional[object] = None, echo: bool = False):
        self.host_object = host_object
        self.diagnostics = Diagnostics()
        self.interpreter = Interpreter(self.diagnostics, echo=echo)
        self._bind_host_natives()

    def _bind_host_natives(self):
        host = self.host_object
        if host is None:
            return
        for name, member in inspect.getmembers(host):
            if not callable(member):
                continue
            # Decorator may mark the bound method or the underlying function
            is_native = getattr(member, "_is_lox_native", False)
            if not is_native:
                func = getattr(member, "__func__", None)
                if func is not None:
                    is_native = getattr(func, "_is_lox_native", False)
            if not is_native:
                continue
            arity = len(inspect.signature(member).parameters)
            self.interpreter.define_native(NativeFunction(name, arity, member))

    def _source_context(self, source: str, line: int, radius: int = 1) -> str:
        lines = source.splitlines()
        if not line or line < 1 or line > len(lines):
            return ""
        start = max(1, line - radius)
        end = min(len(lines), line + radius)
        width = len(str(end))
        out = []
        for i in range(start, end + 1):
            prefix = ">" if i == line else " "
            out.append(f"{prefix} {str(i).rjust(width)} | {lines[i - 1]}")
        return "\n".join(out)

    def _format_diagnostics(self, source: str) -> str:
        parts = []
        for d in self.diagnostics.records:
            msg = d.format()
            context = self._source_context(source, d.line)
            if context:
                msg = f"{msg}\n{context}"
            parts.append(msg)
        st = self._format_stacktrace()
        if st:
            parts.append(st)
        return "\n".join(parts)

    def _format_stacktrace(self) -> str:
        frames = []
        for frame in self.interpreter.call_stack:
            frames.append(f"({frame.get('name') or '<call>'} line {frame.get('line')})")
        if not frames:
            return ""
        return "Lox stacktrace: " + " ".join(frames)

    def _error(self, source: str) -> ExecutionResult:
        msg = self._format_diagnostics(source)
        self.interpreter.side_effects.append({'topics': ['stderr'], 'message': msg})
        return ExecutionResult(
            status='error',
            error_message=msg,
            diagnostics=list(self.diagnostics.records),
            side_effects=self.interpreter.side_effects,
        )

    def _stack_overflow(self, source: str) -> ExecutionResult:
        interp = self.interpreter
        line = interp.call_stack[-1]['line'] if interp.call_stack else 0
        interp.call_stack.clear()
        self.diagnostics.error(line, "", "Stack overflow.", kind='runtime')
        return self._error(source)

    def handle_script(self, source_code: str) -> ExecutionResult:
        """The main entry point to execute a script."""
        self.diagnostics.reset()
        self.interpreter.side_effects = []
        self.interpreter.call_stack.clear()
        interp = self.interpreter

        # 1. Scan and parse; deeply nested source can exhaust the host stack here too
        try:
            tokens = scan(source_code, self.diagnostics)
            interp._dbg("scanned", len(tokens), "tokens")
            statements = parse(tokens, self.diagnostics)
            interp._dbg("parsed", len(statements), "statements")
        except RecursionError:
            return self._stack_overflow(source_code)
        if self.diagnostics.had_error:
            return self._error(source_code)

        # 2. Resolve
        try:
            resolve(statements, interp, self.diagnostics)
        except RecursionError:
            return self._stack_overflow(source_code)
        if self.diagnostics.had_error:
            return self._error(source_code)

        # 3. Evaluate
        try:
            value = interp.interpret(statements)
        except RecursionError:
            return self._stack_overflow(source_code)
        except Exception as e:
            self.diagnostics.error(0, "", f"InternalError: {e}", kind='runtime')
            return self._error(source_code)

        if self.diagnostics.had_runtime_error:
            return self._error(source_code)

        return ExecutionResult(
            status='success',
            value=value,
            side_effects=interp.side_effects,
        )
