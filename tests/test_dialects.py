import pytest

from aliasctl.dialects import DEFINITION_KEYWORDS, Dialect
from aliasctl.errors import UnsupportedDialectError


def test_names():
    assert Dialect.names() == ["bash", "zsh", "fish", "ksh", "powershell", "pwsh", "cmd"]


@pytest.mark.parametrize("name", ["bash", "zsh", "fish", "ksh", "powershell", "pwsh", "cmd"])
def test_from_name(name):
    dialect = Dialect.from_name(name)

    assert dialect.value == name
    assert str(dialect) == name


def test_from_name__unsupported_suggests_close_name():
    with pytest.raises(UnsupportedDialectError) as exc_info:
        Dialect.from_name("bsh")

    error = exc_info.value
    assert isinstance(error, ValueError)
    assert error.message == "unsupported shell 'bsh'"
    assert "Did you mean 'bash'?" in error.hints
    assert "Supported shells: bash, zsh, fish, ksh, powershell, pwsh, cmd" in error.hints


def test_from_name__no_close_match():
    with pytest.raises(UnsupportedDialectError) as exc_info:
        Dialect.from_name("xyzzy-terminal")

    assert not any(hint.startswith("Did you mean") for hint in exc_info.value.hints)


@pytest.mark.parametrize(
    "dialect, family",
    [
        (Dialect.BASH, "posix"),
        (Dialect.ZSH, "posix"),
        (Dialect.KSH, "posix"),
        (Dialect.FISH, "fish"),
        (Dialect.POWERSHELL, "powershell"),
        (Dialect.PWSH, "powershell"),
        (Dialect.CMD, "macro"),
    ],
)
def test_family(dialect, family):
    assert dialect.family == family


def test_comment_prefix():
    assert Dialect.CMD.comment_prefix == "REM"
    assert all(d.comment_prefix == "#" for d in Dialect if d is not Dialect.CMD)


def test_keywords():
    assert Dialect.ZSH.keywords == ["alias "]
    assert Dialect.FISH.keywords == ["alias ", "function "]
    assert Dialect.PWSH.keywords == ["function ", "Set-Alias "]
    assert Dialect.CMD.keywords == ["doskey "]
    for dialect in Dialect:
        assert set(dialect.keywords) <= set(DEFINITION_KEYWORDS)
