import sys
from pathlib import Path

from lox.lox_runtime import ScriptRunner
from lox.lox_printer import Printer

EX_USAGE = 64
EX_DATAERR = 65
EX_SOFTWARE = 70

# Lox recursion runs on the host stack; deep but finite programs need headroom.
RECURSION_LIMIT = 5000


# A basic input prompt; returns "" at end of input.
def read_line(prompt: str) -> str:
    sys.stdout.write(prompt)
    sys.stdout.flush()
    return sys.stdin.readline()


def run_script_file(file_path: str):
    """Run a Lox script file non-interactively and exit with appropriate status."""
    runner = ScriptRunner(echo=True)
    p = Path(file_path)
    try:
        source = p.read_text(encoding="utf-8")
    except (FileNotFoundError, IsADirectoryError, UnicodeDecodeError):
        print(f"Error: could not read source path: {file_path}", file=sys.stderr)
        raise SystemExit(EX_USAGE)
    result = runner.handle_script(source)
    if result.status == 'error':
        print(result.format_error(), file=sys.stderr)
        raise SystemExit(EX_SOFTWARE if result.had_runtime_error else EX_DATAERR)


def repl():
    print("Welcome to lox 1.0.0.")
    print()

    runner = ScriptRunner(echo=True)
    printer = Printer()

    while True:
        try:
            raw = read_line("> ")
            if raw == "":
                raise EOFError
            line = raw.strip()

            if not line:
                continue
            if line in ("/exit", "/quit"):
                break
            if line == "/clear":
                print("\x1bc", end="")
                continue

            result = runner.handle_script(line)
            if result.status == 'error':
                print(result.format_error(), file=sys.stderr)
                continue

            if result.value is not None:
                print(printer.pformat(result.value))

        except EOFError:
            print("\nExiting.")
            break


def main(argv=None):
    """Run a script file when provided, otherwise start the interactive REPL."""
    args = sys.argv[1:] if argv is None else argv
    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))
    if len(args) > 1:
        print("Usage: plox [script]", file=sys.stderr)
        raise SystemExit(EX_USAGE)
    if len(args) == 1:
        run_script_file(args[0])
        return
    repl()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nExiting.")
