import sys

import pytest

from lox import ScriptRunner, lox_native


def run_lox(src: str, runner: ScriptRunner | None = None):
    runner = runner or ScriptRunner()
    return runner.handle_script(src)


def assert_ok(res, expected_output=None):
    assert res.status == 'success', res.error_message
    if expected_output is not None:
        assert res.output == expected_output


def assert_error(res, contains: str | None = None):
    assert res.status == 'error', f"expected error, got success: {res.value!r}"
    if contains is not None:
        assert contains in (res.error_message or ""), f"error did not contain {contains!r}: {res.error_message!r}"


def test_success_result_carries_output_and_value():
    res = run_lox('print "hi"; 1 + 2;')
    assert_ok(res, ["hi"])
    assert res.value == 3
    assert res.diagnostics == []
    assert res.format_error() == ""


def test_parse_error_is_formatted_with_context():
    res = run_lox("print 1;\nvar x = ;\nprint 2;")
    assert_error(res, "[line 2] Error at ';': Expect expression.")
    assert "> 2 | var x = ;" in res.error_message
    assert [d.kind for d in res.diagnostics] == ['parse']
    assert not res.had_runtime_error


def test_static_error_prevents_execution():
    res = run_lox("print 1; var = 2;")
    assert_error(res, "Expect variable name.")
    assert res.output == []


def test_scan_errors_prevent_execution():
    res = run_lox('print 1; print "open')
    assert_error(res, "Unterminated string.")
    assert res.output == []


def test_resolution_error_prevents_execution():
    res = run_lox("print 1;\nreturn 2;")
    assert_error(res, "[line 2] Error at 'return': Can't return from top-level code.")
    assert res.output == []
    assert [d.kind for d in res.diagnostics] == ['resolve']


def test_all_parse_errors_reported():
    res = run_lox("var = 1;\nprint ;\nfun (a) {}")
    assert_error(res)
    assert [d.line for d in res.diagnostics] == [1, 2, 3]


def test_runtime_error_keeps_earlier_output():
    res = run_lox('print "before";\nprint "a" + 1;\nprint "after";')
    assert_error(res, "[line 2] Error at '+': Operands must be two numbers or two strings.")
    assert res.output == ["before"]
    assert res.had_runtime_error
    stderr_effects = [e for e in res.side_effects if e.get('topics') == ['stderr']]
    assert stderr_effects
    assert res.error_message in stderr_effects[-1]['message']


def test_runtime_error_includes_stacktrace():
    src = "fun boom(x) { return x + nil; }\nfun outer() { return boom(1); }\nouter();"
    res = run_lox(src)
    assert_error(res, "Lox stacktrace: (outer line 3) (boom line 2)")


def test_stack_overflow_is_reported():
    res = run_lox("fun f() { return f(); }\nf();")
    assert_error(res, "Stack overflow.")
    assert res.had_runtime_error


@pytest.mark.parametrize("nest", [
    lambda depth: "print " + "(" * depth + "1" + ")" * depth + ";",
    lambda depth: "{" * depth + "print 1;" + "}" * depth,
], ids=["grouping", "blocks"])
def test_deeply_nested_source_is_reported_as_stack_overflow(nest):
    runner = ScriptRunner()
    res = run_lox(nest(max(300, sys.getrecursionlimit())), runner)
    assert_error(res, "Stack overflow.")
    assert res.had_runtime_error
    # The runner is still usable afterwards.
    assert_ok(run_lox("print 2;", runner), ["2"])


def test_globals_persist_between_scripts():
    runner = ScriptRunner()
    assert_ok(run_lox("var counter = 1; fun bump() { counter = counter + 1; }", runner))
    assert_ok(run_lox("bump(); bump();", runner))
    assert_ok(run_lox("print counter;", runner), ["3"])


def test_errors_do_not_leak_into_next_script():
    runner = ScriptRunner()
    assert_error(run_lox("print nope;", runner))
    res = run_lox("print 1;", runner)
    assert_ok(res, ["1"])
    assert res.diagnostics == []


def test_closures_from_earlier_lines_keep_working():
    runner = ScriptRunner()
    run_lox("fun make() { var n = 0; fun inc() { n = n + 1; return n; } return inc; }", runner)
    run_lox("var c = make();", runner)
    assert run_lox("c();", runner).value == 1
    assert run_lox("c();", runner).value == 2


class Host:
    def __init__(self):
        self.seen = []

    @lox_native
    def record(self, value):
        self.seen.append(value)
        return len(self.seen)

    @lox_native
    def pair(self, a, b):
        return a + b

    def hidden(self):
        return "not exposed"


def test_host_natives_are_bound():
    host = Host()
    runner = ScriptRunner(host_object=host)
    res = run_lox('print record("x"); print pair(1, 2); print record;', runner)
    assert_ok(res, ["1", "3", "<native fn record>"])
    assert host.seen == ["x"]


def test_host_native_arity_is_checked():
    runner = ScriptRunner(host_object=Host())
    assert_error(run_lox("pair(1);", runner), "Expected 2 arguments but got 1.")


def test_undecorated_host_methods_are_not_bound():
    runner = ScriptRunner(host_object=Host())
    assert_error(run_lox("hidden();", runner), "Undefined variable 'hidden'.")


def test_echo_prints_immediately(capsys):
    runner = ScriptRunner(echo=True)
    run_lox('print "now";', runner)
    assert capsys.readouterr().out == "now\n"


def test_debug_tracing(monkeypatch, capsys):
    monkeypatch.setenv("LOX_DEBUG", "1")
    run_lox("{ var a = 1; print a; }")
    err = capsys.readouterr().err
    assert "[DBG] scanned" in err
    assert "[DBG] resolve Variable a -> 0" in err
