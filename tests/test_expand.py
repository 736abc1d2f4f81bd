import pytest

from minishell.env import Environment
from minishell.expand import (
    QuoteError,
    count_tokens,
    double_quoted,
    expand_variable,
    quotes_balanced,
    single_quoted,
)


@pytest.fixture
def env():
    environment = Environment.from_mapping({"HOME": "/home/user", "NAME": "world", "X": "hello"})
    environment.add("EMPTYVAR", None)
    return environment


def test_expand_known_variable(env):
    text = "$HOME"
    value, index = expand_variable(text, 0, env, 0)
    assert value == "/home/user"
    assert index == len(text)


def test_expand_unknown_variable_is_empty(env):
    text = "$NOPE"
    value, index = expand_variable(text, 0, env, 0)
    assert value == ""
    assert index == len(text)


def test_expand_valueless_variable_is_empty(env):
    value, _ = expand_variable("$EMPTYVAR", 0, env, 0)
    assert value == ""


def test_expand_status(env):
    text = "$?x"
    value, index = expand_variable(text, 0, env, 42)
    assert value == str(42)
    assert text[index:] == "x"


def test_lone_dollar_at_end(env):
    text = "$"
    value, index = expand_variable(text, 0, env, 0)
    assert value == "$"
    assert index == len(text)


def test_dollar_before_non_name_char(env):
    text = "$ x"
    value, index = expand_variable(text, 0, env, 0)
    assert value == "$"
    assert text[index:] == " x"


def test_name_stops_at_non_name_char(env):
    text = "$NAME-rest"
    value, index = expand_variable(text, 0, env, 0)
    assert value == "world"
    assert text[index:] == "-rest"


def test_expand_requires_dollar(env):
    with pytest.raises(ValueError):
        expand_variable("abc", 0, env, 0)


@pytest.mark.parametrize(
    "text, quote, expected",
    [
        ("'a'", "'", True),
        ("'a", "'", False),
        ('"a" "b"', '"', True),
        ('"a" "b', '"', False),
        ("no quotes", '"', True),
    ],
)
def test_quotes_balanced(text, quote, expected):
    assert quotes_balanced(text, quote) is expected


def test_single_quoted_keeps_dollar():
    text = "'hello $X' rest"
    content, index = single_quoted(text, 0)
    assert content == "hello $X"
    assert text[index:] == " rest"


def test_single_quoted_unbalanced():
    with pytest.raises(QuoteError) as info:
        single_quoted("'abc", 0)
    assert info.value.quote == "'"
    assert "matching `''" in str(info.value)


def test_double_quoted_expands(env):
    text = '"hi $NAME!" tail'
    content, index = double_quoted(text, 0, env, 0)
    assert content == "hi world!"
    assert text[index:] == " tail"


def test_double_quoted_status(env):
    content, _ = double_quoted('"code $?"', 0, env, 7)
    assert content == "code " + str(7)


def test_double_quoted_keeps_single_quotes(env):
    text = "\"it's\""
    with pytest.raises(QuoteError):
        single_quoted(text, 0)
    content, index = double_quoted(text, 0, env, 0)
    assert content == "it's"
    assert index == len(text)


def test_double_quoted_unbalanced(env):
    with pytest.raises(QuoteError) as info:
        double_quoted('"abc', 0, env, 0)
    assert info.value.quote == '"'


def test_count_tokens_blank_line(env):
    assert count_tokens("   ", env, 0) == count_tokens("", env, 0) == 0


def test_count_tokens_additive_over_words(env):
    assert count_tokens("abc def", env, 0) == count_tokens("abc", env, 0) + count_tokens("def", env, 0)


def test_count_tokens_extra_spaces_do_not_matter(env):
    assert count_tokens("  abc    def  ", env, 0) == count_tokens("abc def", env, 0)


def test_count_tokens_expands_variables(env):
    assert count_tokens("$X", env, 0) == count_tokens("hello", env, 0)
    assert count_tokens('"$X"', env, 0) == count_tokens("hello", env, 0)


def test_count_tokens_grows_with_words(env):
    assert count_tokens("a b c", env, 0) > count_tokens("abc", env, 0)