import pytest

from minish.env import Environment
from minish.tokens import (
    RedirFlag,
    Token,
    env_key_size,
    expand_tokens,
    expand_word,
    is_redirection,
    split_command,
    unclosed_quote,
    unexpected_token,
)

HOME = "/home/user"


@pytest.fixture
def env():
    return Environment([f"HOME={HOME}", "OUT=file", "EMPTY="])


@pytest.mark.parametrize(
    "text, expected",
    [
        ("echo hello world", ["echo", "hello", "world"]),
        ("  ls   -l  ", ["ls", "-l"]),
        ('echo "a b" c', ["echo", '"a b"', "c"]),
        ("echo 'x  y'", ["echo", "'x  y'"]),
        ("cat<in>out", ["cat", "<", "in", ">", "out"]),
        ("cat >>log", ["cat", ">>", "log"]),
        ("a <<<b", ["a", "<<<", "b"]),
        ('echo ">" x', ["echo", '">"', "x"]),
        ('echo "a b', ["echo", '"a b']),
        ("", []),
    ],
)
def test_split_command(text, expected):
    assert split_command(text, " ") == expected


@pytest.mark.parametrize(
    "text", ["ls -l /tmp", "a  b   c", "cat<in>out", "x >> y << z"]
)
def test_split_command_keeps_every_non_separator(text):
    words = split_command(text, " ")
    assert "".join(words) == text.replace(" ", "")
    assert all(words)


def test_split_command_other_separator():
    assert split_command("a:b::c", ":") == ["a", "b", "c"]


def test_unclosed_quote():
    assert unclosed_quote("'abc'", "'") is True
    assert unclosed_quote("'abc", "'") is False
    assert unclosed_quote('"', '"') is False


@pytest.mark.parametrize("name", ["HOME", "_x9", "PATH"])
def test_env_key_size_counts_name(name):
    assert env_key_size("$" + name) == len(name)
    assert env_key_size("$" + name + "-rest") == len(name)


def test_env_key_size_digit_and_empty():
    assert env_key_size("$1abc") == 1
    assert env_key_size("$") == 0
    assert env_key_size("$-x") == 0


def test_expand_plain_variable(env):
    assert expand_word("$HOME", env) == HOME
    assert expand_word('"$HOME"', env) == HOME
    assert expand_word('"a $HOME b"', env) == "a " + HOME + " b"


def test_single_quotes_keep_dollar(env):
    assert expand_word("'$HOME'", env) == "$HOME"


def test_exit_status(env):
    assert expand_word("$?", env, 42) == str(42)
    assert expand_word('"$?"', env, 7) == str(7)


def test_lone_dollar_is_literal(env):
    assert expand_word("$", env) == "$"
    assert expand_word('"$"', env) == "$"
    assert expand_word('$"x"', env) == "$x"


def test_unknown_variable_is_empty(env):
    assert expand_word("$UNSET", env) == ""
    assert expand_word("$HOMEx", env) == ""
    assert expand_word("$EMPTY", env) == ""


def test_quotes_are_removed(env):
    assert expand_word("a'b'c", env) == "abc"


def test_unclosed_quote_kept(env):
    assert expand_word("'abc", env) == "'abc"


@pytest.mark.parametrize("word", ["plain", "a-b.c", "/usr/bin"])
def test_expand_leaves_plain_words(env, word):
    assert expand_word(word, env) == word


@pytest.mark.parametrize("text", ["<", "<<", ">", ">>"])
def test_is_redirection_true(text):
    assert is_redirection(text) is True


@pytest.mark.parametrize("text", ["<<<", "<>", "><", ">>>"])
def test_is_redirection_false(text):
    assert is_redirection(text) is False


@pytest.mark.parametrize(
    "redir, expected",
    [
        ("<<<", "<"),
        ("<<<<", "<<"),
        (">><", "<"),
        ("<>", ">"),
        ("<<>>", ">>"),
        (">", None),
        ("abc", None),
    ],
)
def test_unexpected_token(redir, expected):
    assert unexpected_token(redir) == expected


def test_expand_tokens_flags_and_values(env):
    tokens = expand_tokens(split_command("cat < in > $OUT", " "), env)
    assert tokens == [
        Token("cat"),
        Token("<", RedirFlag.VALID),
        Token("in"),
        Token(">", RedirFlag.VALID),
        Token("file"),
    ]


def test_expand_tokens_invalid_redirection(env):
    tokens = expand_tokens(["<<<", "x"], env)
    assert tokens[0].redir_flag == RedirFlag.INVALID
    assert tokens[1].redir_flag == RedirFlag.NONE


def test_quoted_redirection_is_a_word(env):
    tokens = expand_tokens(['">"'], env)
    assert tokens == [Token(">", RedirFlag.NONE)]