"""Supported shell dialects"""

from enum import Enum
from typing import List

from aliasctl.errors import UnsupportedDialectError


class Dialect(Enum):
    """Shell syntax families aliasctl can read and write"""

    BASH = "bash"
    ZSH = "zsh"
    FISH = "fish"
    KSH = "ksh"
    POWERSHELL = "powershell"
    PWSH = "pwsh"
    CMD = "cmd"

    @classmethod
    def names(cls) -> List[str]:
        """Canonical names in declaration order"""
        return [dialect.value for dialect in cls]

    @classmethod
    def from_name(cls, name: str) -> "Dialect":
        """Look up a dialect by its canonical name"""
        try:
            return cls(name)
        except ValueError:
            raise UnsupportedDialectError(name, cls.names()) from None

    @property
    def family(self) -> str:
        return _FAMILIES[self]

    @property
    def comment_prefix(self) -> str:
        return "REM" if self is Dialect.CMD else "#"

    @property
    def keywords(self) -> List[str]:
        """Line prefixes that introduce a definition in this dialect"""
        return list(_KEYWORDS[self.family])

    def __str__(self) -> str:
        return self.value


_FAMILIES = {
    Dialect.BASH: "posix",
    Dialect.ZSH: "posix",
    Dialect.KSH: "posix",
    Dialect.FISH: "fish",
    Dialect.POWERSHELL: "powershell",
    Dialect.PWSH: "powershell",
    Dialect.CMD: "macro",
}

ALIAS = "alias "
FUNCTION = "function "
SET_ALIAS = "Set-Alias "
DOSKEY = "doskey "

_KEYWORDS = {
    "posix": (ALIAS,),
    "fish": (ALIAS, FUNCTION),
    "powershell": (FUNCTION, SET_ALIAS),
    "macro": (DOSKEY,),
}

# Every keyword any dialect uses, in the order AI responses are scanned
DEFINITION_KEYWORDS = (ALIAS, FUNCTION, SET_ALIAS, DOSKEY)
