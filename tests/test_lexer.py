import pytest

from minishell.env import Environment
from minishell.expand import QuoteError
from minishell.lexer import Lexer, tokenize
from minishell.syntax import Builtin, ParseError, TokenType


@pytest.fixture
def env():
    return Environment.from_mapping({"USER": "alice", "HOME": "/home/user"})


def texts(tokens):
    return [token.text for token in tokens]


def test_simple_words(env):
    tokens = tokenize("echo hello world", env, 0)
    assert texts(tokens) == ["echo", "hello", "world"]
    assert tokens[0].type == TokenType.COMMAND
    assert tokens[0].builtin == Builtin.ECHO
    assert tokens[1].builtin == Builtin.NONE


def test_lexer_class_matches_function(env):
    line = "ls -l | wc"
    assert texts(Lexer(line, env, 0).tokenize()) == texts(tokenize(line, env, 0))


def test_pipe_starts_new_command(env):
    tokens = tokenize("ls -l | wc", env, 0)
    assert texts(tokens) == ["ls", "-l", "|", "wc"]
    assert tokens[2].type == TokenType.PIPE
    assert tokens[3].type == TokenType.COMMAND


def test_pipe_inside_word(env):
    tokens = tokenize("ls|wc", env, 0)
    assert texts(tokens) == ["ls", "|", "wc"]
    assert tokens[1].type == TokenType.PIPE
    assert tokens[2].type == TokenType.COMMAND


def test_redirection_targets_typed(env):
    tokens = tokenize("cat < in > out", env, 0)
    assert texts(tokens) == ["cat", "<", "in", ">", "out"]
    assert tokens[1].type == TokenType.REDIR_INPUT
    assert tokens[2].type == TokenType.REDIR_INPUT
    assert tokens[3].type == TokenType.REDIR_OUTPUT
    assert tokens[4].type == TokenType.REDIR_OUTPUT


def test_heredoc_and_append(env):
    tokens = tokenize("cat << EOF >> log", env, 0)
    assert texts(tokens) == ["cat", "<<", "EOF", ">>", "log"]
    assert [t.type for t in tokens[1:]] == [
        TokenType.REDIR_HERE_DOC,
        TokenType.REDIR_HERE_DOC,
        TokenType.REDIR_APPEND,
        TokenType.REDIR_APPEND,
    ]


def test_operator_inside_word(env):
    tokens = tokenize("echo hi>out", env, 0)
    assert texts(tokens) == ["echo", "hi", ">", "out"]
    assert tokens[1].type == TokenType.ARGUMENT
    assert tokens[3].type == TokenType.REDIR_OUTPUT


def test_variable_expansion(env):
    assert texts(tokenize("echo $USER", env, 0)) == ["echo", "alice"]


def test_exit_status_expansion(env):
    assert texts(tokenize("echo $?", env, 42)) == ["echo", "42"]


def test_adjacent_variables_join(env):
    assert texts(tokenize("echo $USER$HOME", env, 0)) == ["echo", "alice" + "/home/user"]


def test_variable_followed_by_dot(env):
    assert texts(tokenize("echo $USER.txt", env, 0)) == ["echo", "alice" + ".txt"]


def test_lone_dollar_is_literal(env):
    assert texts(tokenize("echo $", env, 0)) == ["echo", "$"]


def test_trailing_dollar_in_word(env):
    assert texts(tokenize("echo a$", env, 0)) == ["echo", "a$"]


def test_single_quotes_do_not_expand(env):
    assert texts(tokenize("echo '$USER'", env, 0)) == ["echo", "$USER"]


def test_double_quotes_expand(env):
    assert texts(tokenize('echo "hi $USER"', env, 0)) == ["echo", "hi " + "alice"]


def test_quotes_join_with_word(env):
    tokens = tokenize('e"ch"o x', env, 0)
    assert texts(tokens) == ["echo", "x"]
    assert tokens[0].builtin == Builtin.ECHO


def test_quoted_value_in_assignment(env):
    assert texts(tokenize('export A="b c"', env, 0)) == ["export", "A=b c"]


def test_absolute_path_command(env):
    tokens = tokenize("/bin/ls -la", env, 0)
    assert texts(tokens) == ["/bin/ls", "-la"]
    assert tokens[0].type == TokenType.COMMAND
    assert tokens[0].builtin == Builtin.NONE


@pytest.mark.parametrize("line", ["", "   "])
def test_blank_line_gives_nothing(env, line):
    assert tokenize(line, env, 0) == []


def test_empty_expansion_alone_gives_nothing(env):
    assert tokenize("$NOPE", env, 0) == []


def test_unbalanced_double_quote(env):
    with pytest.raises(QuoteError) as info:
        tokenize('echo "abc', env, 0)
    assert info.value.quote == '"'


def test_unbalanced_single_quote(env):
    with pytest.raises(QuoteError) as info:
        tokenize("echo 'abc", env, 0)
    assert info.value.quote == "'"


@pytest.mark.parametrize(
    "line, offending",
    [
        ("| ls", "|"),
        ("ls |", "newline"),
        ("ls | | wc", "|"),
        ("cat <", "newline"),
        ("ls >", "newline"),
        ("cat < | x", "|"),
        ("echo a>", "newline"),
    ],
)
def test_syntax_errors(env, line, offending):
    with pytest.raises(ParseError) as info:
        tokenize(line, env, 0)
    assert info.value.token == offending


def test_triple_operator_in_word(env):
    with pytest.raises(ParseError) as info:
        tokenize("echo a>>>b", env, 0)
    assert info.value.token == ">"


def test_every_token_has_text(env):
    tokens = tokenize("cat < in | grep $USER >> log", env, 0)
    assert all(token.text for token in tokens)
    assert sum(token.type == TokenType.PIPE for token in tokens) == 1