"""Render and parse alias definitions for each shell dialect"""

from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from aliasctl.dialects import ALIAS, DOSKEY, FUNCTION, SET_ALIAS, Dialect

Definition = Tuple[str, str]


def _strip_quotes(text: str) -> str:
    """Drop one pair of matching outer quotes"""
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
        return text[1:-1]
    return text


def _is_fish_end(line: str) -> bool:
    return line == "end" or line.startswith(("end ", "end;"))


# Renderers. The space check picks the wrapped form over the plain alias
# form for dialects that have both; it is a heuristic, not a shell parser.

def _render_posix(name: str, command: str) -> str:
    return f"{ALIAS}{name}='{command}'"


def _render_fish(name: str, command: str) -> str:
    if " " in command:
        return f"{FUNCTION}{name}\n    {command}\nend"
    return f"{ALIAS}{name} '{command}'"


def _render_powershell(name: str, command: str) -> str:
    if " " in command:
        return f"{FUNCTION}{name} {{ {command} }}"
    return f"{SET_ALIAS}{name} {command}"


def _render_macro(name: str, command: str) -> str:
    return f"{DOSKEY}{name}={command}"


# Parsers. Each receives the first line with leading whitespace removed and
# the lines that follow it, and returns (definition, extra lines consumed).

def _parse_posix(line: str, following: List[str]) -> Tuple[Optional[Definition], int]:
    if not line.startswith(ALIAS):
        return None, 0
    parts = line[len(ALIAS):].split("=", 1)
    if len(parts) != 2:
        return None, 0
    return (parts[0].strip(), _strip_quotes(parts[1])), 0


def _parse_fish(line: str, following: List[str]) -> Tuple[Optional[Definition], int]:
    if line.startswith(ALIAS):
        parts = line[len(ALIAS):].split(" ", 1)
        if len(parts) != 2:
            return None, 0
        return (parts[0], _strip_quotes(parts[1])), 0

    if line.startswith(FUNCTION):
        name = line[len(FUNCTION):].split(" ", 1)[0].rstrip(";")
        if not following:
            return None, 0
        body = following[0].strip()
        if _is_fish_end(body):
            # empty function; the terminator was the body line
            return None, 1
        consumed = 1
        if len(following) > 1 and _is_fish_end(following[1].strip()):
            consumed = 2
        return (name, body), consumed

    return None, 0


def _parse_powershell(line: str, following: List[str]) -> Tuple[Optional[Definition], int]:
    if line.startswith(FUNCTION):
        parts = line[len(FUNCTION):].split(" ", 1)
        if len(parts) != 2 or "{" not in parts[1]:
            return None, 0
        command = parts[1].split("{", 1)[1].strip()
        if command.endswith("}"):
            command = command[:-1]
        return (parts[0], command.strip()), 0

    if line.startswith(SET_ALIAS):
        fields = line[len(SET_ALIAS):].split()
        if len(fields) < 2:
            return None, 0
        return (fields[0], fields[1]), 0

    return None, 0


def _parse_macro(line: str, following: List[str]) -> Tuple[Optional[Definition], int]:
    if not line.startswith(DOSKEY):
        return None, 0
    parts = line[len(DOSKEY):].split("=", 1)
    if len(parts) != 2:
        return None, 0
    return (parts[0], parts[1]), 0


RENDERERS: Dict[str, Callable[[str, str], str]] = {
    "posix": _render_posix,
    "fish": _render_fish,
    "powershell": _render_powershell,
    "macro": _render_macro,
}

PARSERS: Dict[str, Callable[[str, List[str]], Tuple[Optional[Definition], int]]] = {
    "posix": _parse_posix,
    "fish": _parse_fish,
    "powershell": _parse_powershell,
    "macro": _parse_macro,
}


def render(name: str, command: str, dialect: Dialect) -> str:
    """Produce the definition of one alias in the syntax of dialect"""
    return RENDERERS[dialect.family](name, command)


def parse(text: str, dialect: Dialect) -> Optional[Definition]:
    """Recover (name, command) from a definition line or block.

    Only the first line decides whether this is a definition; for fish
    functions the second line is taken as the body. Returns None for
    anything that is not a definition in this dialect.
    """
    lines = text.splitlines()
    if not lines or not lines[0].lstrip().startswith(tuple(dialect.keywords)):
        return None
    definition, _ = PARSERS[dialect.family](lines[0].lstrip(), lines[1:])
    return definition


def parse_lines(lines: Iterable[str], dialect: Dialect) -> Iterator[Definition]:
    """Yield every definition found while scanning the lines of a file"""
    parser = PARSERS[dialect.family]
    keywords = tuple(dialect.keywords)
    pending = [line.rstrip("\r\n") for line in lines]
    index = 0
    while index < len(pending):
        line = pending[index].lstrip()
        if not line.startswith(keywords):
            index += 1
            continue
        # fish function bodies are the only multi-line form
        following = pending[index + 1:index + 3]
        definition, consumed = parser(line, following)
        index += 1 + consumed
        if definition is not None:
            yield definition
