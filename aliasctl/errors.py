"""Error types raised by aliasctl"""

from typing import Iterable, List, Optional

from rapidfuzz import fuzz, process


def closest_match(value: str, choices: Iterable[str], cutoff: float = 60) -> Optional[str]:
    """Return the choice that looks most like value, if any is close enough"""
    match = process.extractOne(value, list(choices), scorer=fuzz.ratio, score_cutoff=cutoff)
    if match:
        return match[0]
    return None


class AliasCtlError(Exception):
    """Base error carrying an optional cause and a list of hints for the user"""

    def __init__(self, message: str, cause: Optional[BaseException] = None, hints: Iterable[str] = ()):
        self.message = message
        self.cause = cause
        self.hints: List[str] = list(hints)
        super().__init__(message)

    def __str__(self) -> str:
        result = self.message
        if self.cause is not None:
            result += f": {self.cause}"
        if self.hints:
            result += "\n\n" + "\n".join(f"- {hint}" for hint in self.hints)
        return result


class NotFoundError(AliasCtlError):
    """An alias (or file) the user asked for does not exist"""

    def __init__(self, resource_type: str, name: str, hints: Iterable[str] = ()):
        self.resource_type = resource_type
        self.name = name
        super().__init__(f"{resource_type} '{name}' not found", hints=hints)

    @classmethod
    def for_alias(cls, name: str, known: Iterable[str]) -> "NotFoundError":
        hints = []
        suggestion = closest_match(name, known)
        if suggestion:
            hints.append(f"Did you mean '{suggestion}'?")
        hints.append("Run 'aliasctl list' to see available aliases")
        return cls("alias", name, hints=hints)


class UnsupportedDialectError(AliasCtlError, ValueError):
    """A shell name that is not one of the supported dialects"""

    def __init__(self, name: str, valid_names: Iterable[str]):
        self.name = name
        self.valid_names = list(valid_names)
        hints = []
        suggestion = closest_match(name, self.valid_names)
        if suggestion:
            hints.append(f"Did you mean '{suggestion}'?")
        hints.append(f"Supported shells: {', '.join(self.valid_names)}")
        super().__init__(f"unsupported shell '{name}'", hints=hints)


class StorageError(AliasCtlError):
    """Reading or writing the alias store or a shell file failed"""


class ConfigurationError(AliasCtlError):
    """Missing or invalid configuration"""


class TranslationError(AliasCtlError):
    """The AI provider could not produce a translation"""

    def __init__(self, message: str, cause: Optional[BaseException] = None,
                 hints: Iterable[str] = (), provider: Optional[str] = None):
        self.provider = provider
        super().__init__(message, cause=cause, hints=hints)
