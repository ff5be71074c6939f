import pytest

from minish.env import Environment
from minish.errors import ErrorCode, ShellError
from minish.parser import parse
from minish.redirect import (
    check_syntax,
    collect_redirections,
    read_heredoc,
)


def first(line):
    return parse(line, Environment())[0]


def feeder(lines, prompts=None):
    remaining = iter(lines)

    def read_line(prompt):
        if prompts is not None:
            prompts.append(prompt)
        return next(remaining, None)

    return read_line


def test_check_syntax_reports_unexpected_token():
    with pytest.raises(ShellError) as excinfo:
        check_syntax(first("cat <> f"))
    assert excinfo.value.code is ErrorCode.UNEXPECTED_TOKEN
    assert excinfo.value.messages() == [
        "minishell: syntax error near unexpected token `>'"
    ]
    assert excinfo.value.exit_status() == 258


def test_missing_input_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ShellError) as excinfo:
        collect_redirections(first("cat < missing"))
    assert excinfo.value.code is ErrorCode.NO_SUCH_FILE
    assert excinfo.value.messages() == [
        "minishell: missing: No such file or directory"
    ]


def test_redirection_at_end_of_line(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ShellError) as excinfo:
        collect_redirections(first("echo hi >"))
    assert excinfo.value.code is ErrorCode.UNEXPECTED_NEWLINE
    assert excinfo.value.messages() == [
        "minishell: syntax error near unexpected token `newline'"
    ]


def test_redirection_followed_by_redirection(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ShellError) as excinfo:
        collect_redirections(first("echo hi > >"))
    assert excinfo.value.code is ErrorCode.UNEXPECTED_TOKEN
    assert excinfo.value.index == 3


def test_every_output_file_is_created_last_wins(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    found = collect_redirections(first("echo hi > a > b"))
    assert (tmp_path / "a").exists()
    assert (tmp_path / "b").exists()
    assert found.output_op == ">"
    assert found.output_target == "b"
    assert found.redirects_output


def test_truncate_and_append_on_collect(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "t").write_text("old")
    (tmp_path / "p").write_text("old")
    truncating = collect_redirections(first("echo hi > t"))
    appending = collect_redirections(first("echo hi >> p"))
    assert truncating.output_op == ">"
    assert truncating.output_target == "t"
    assert appending.output_op == ">>"
    assert appending.output_target == "p"
    assert (tmp_path / "t").read_text() == ""
    assert (tmp_path / "p").read_text() == "old"


def test_open_output_appends(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "log").write_bytes(b"one\n")
    found = collect_redirections(first("echo two >> log"))
    assert found.output_op == ">>"
    assert found.output_target == "log"
    with found.open_output() as handle:
        written = handle.write(b"two\n")
    assert written == 4
    assert (tmp_path / "log").read_bytes() == b"one\ntwo\n"


def test_open_input_reads_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "in").write_bytes(b"data")
    found = collect_redirections(first("cat < in"))
    assert found.input_op == "<"
    with found.open_input(feeder([])) as handle:
        assert handle.read() == b"data"


def test_open_input_file_removed(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "in").write_bytes(b"data")
    found = collect_redirections(first("cat < in"))
    (tmp_path / "in").unlink()
    with pytest.raises(ShellError) as excinfo:
        found.open_input(feeder([]))
    assert excinfo.value.code is ErrorCode.NO_SUCH_FILE


def test_no_redirections(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    found = collect_redirections(first("echo hi"))
    assert found.open_input(feeder([])) is None
    assert found.open_output() is None
    assert not found.redirects_output


def test_read_heredoc_until_delimiter():
    prompts = []
    text = read_heredoc("EOF", feeder(["a", "b", "EOF", "c"], prompts))
    assert text == "a\nb\n"
    assert prompts == ["> ", "> ", "> "]


def test_read_heredoc_matches_first_five_characters():
    text = read_heredoc("abcdefg", feeder(["x", "abcdeXY", "y"]))
    assert text == "x\n"


def test_read_heredoc_stops_at_end_of_input():
    text = read_heredoc("EOF", feeder(["only"]))
    assert text == "only\n"


def test_open_input_heredoc(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    found = collect_redirections(first("cat << END"))
    assert found.input_op == "<<"
    with found.open_input(feeder(["hello", "END"])) as handle:
        assert handle.read() == b"hello\n"