"""Write aliases into shell startup files and read them back"""

import shutil
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, NamedTuple, Optional, Tuple

from aliasctl.codec import parse_lines, render
from aliasctl.dialects import Dialect
from aliasctl.errors import AliasCtlError, NotFoundError, StorageError
from aliasctl.storage import AliasStore
from aliasctl.translator import Capability, TranslationRequest, definition_command


class Markers(NamedTuple):
    """Start and end comment lines delimiting a block owned by aliasctl"""
    start: str
    end: str


MANAGED_TITLE = ("Aliases managed by AliasCtl", "End of aliases managed by AliasCtl")
EXPORT_TITLE = ("Aliases exported by AliasCtl", "End of exported aliases")


def managed_markers(dialect: Dialect) -> Markers:
    prefix = dialect.comment_prefix
    return Markers(f"{prefix} {MANAGED_TITLE[0]}", f"{prefix} {MANAGED_TITLE[1]}")


def export_markers(dialect: Dialect) -> Markers:
    prefix = dialect.comment_prefix
    return Markers(f"{prefix} {EXPORT_TITLE[0]}", f"{prefix} {EXPORT_TITLE[1]}")


def render_interior(definitions: Iterable[Tuple[str, str]], dialect: Dialect) -> str:
    """Definitions sorted by name, one per line (or block), newline terminated"""
    return "".join(
        render(name, command, dialect) + "\n"
        for name, command in sorted(definitions)
    )


def merge_block(existing: Optional[str], interior: str, markers: Markers) -> str:
    """Put interior between the markers, leaving everything else untouched.

    existing is None when the file does not exist. Without a start marker
    the block is appended; with one, whatever sits between the markers is
    replaced. A start marker with no end marker owns the rest of the file.
    """
    block_body = f"{markers.start}\n{interior}{markers.end}"

    if existing is None:
        return block_body + "\n"

    if markers.start not in existing:
        separator = "\n" if existing and not existing.endswith("\n") else ""
        return existing + separator + block_body + "\n"

    prefix, rest = existing.split(markers.start, 1)
    if markers.end in rest:
        _, suffix = rest.split(markers.end, 1)
        return prefix + block_body + suffix
    return prefix + block_body + "\n"


class ShellIntegrator:
    """Apply aliases to a shell configuration file"""

    def __init__(self, store: AliasStore, dialect: Dialect, alias_file: Path):
        self.store = store
        self.dialect = dialect
        self.alias_file = alias_file

    def _read(self, path: Path) -> Optional[str]:
        if not path.exists():
            return None
        try:
            return path.read_text()
        except OSError as e:
            raise StorageError(f"cannot read {path}", cause=e)

    def _write(self, path: Path, content: str) -> None:
        try:
            path.parent.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"cannot create directory {path.parent}", cause=e)
        try:
            path.write_text(content)
        except OSError as e:
            raise StorageError(
                f"cannot write {path}",
                cause=e,
                hints=["Check the file permissions or choose another file with 'aliasctl set-file'"],
            )

    def backup_shell_config(self, config_file: Path) -> Path:
        """Create a timestamped copy of a shell config file next to it"""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        backup_path = config_file.parent / f"{config_file.name}.aliasctl_backup_{timestamp}"
        shutil.copy2(config_file, backup_path)
        return backup_path

    def render_block(self) -> str:
        return render_interior(self.store.list(self.dialect), self.dialect)

    def preview(self) -> Tuple[str, str]:
        """Return (current file content, content after apply)"""
        existing = self._read(self.alias_file)
        new_content = merge_block(existing, self.render_block(), managed_markers(self.dialect))
        return existing or "", new_content

    def apply(self, backup: bool = True) -> int:
        """Write the managed block into the alias file, return alias count"""
        existing = self._read(self.alias_file)
        definitions = self.store.list(self.dialect)
        new_content = merge_block(
            existing, render_interior(definitions, self.dialect), managed_markers(self.dialect)
        )
        if existing == new_content:
            return len(definitions)
        if backup and existing is not None:
            try:
                self.backup_shell_config(self.alias_file)
            except OSError as e:
                raise StorageError(f"cannot back up {self.alias_file}", cause=e)
        self._write(self.alias_file, new_content)
        return len(definitions)

    def export(self, target: Dialect, output_file: Path,
               capability: Optional[Capability] = None,
               on_error: Optional[Callable[[str, AliasCtlError], None]] = None) -> int:
        """Write every alias in target's syntax into an export block of output_file.

        Aliases without a command for target are translated from this
        integrator's dialect when a capability is given, otherwise skipped.
        """
        definitions: List[Tuple[str, str]] = []
        for record in self.store.list_all():
            command = record.get(target)
            if command is None and capability is not None:
                source_command = record.get(self.dialect)
                if source_command is None:
                    continue
                result = TranslationRequest(source_command, self.dialect, target).execute(capability)
                if not result.ok:
                    if on_error is None:
                        raise result.error
                    on_error(record.name, result.error)
                    continue
                command = definition_command(result.command, target)
            if command:
                definitions.append((record.name, command))

        existing = self._read(output_file)
        content = merge_block(existing, render_interior(definitions, target), export_markers(target))
        self._write(output_file, content)
        return len(definitions)

    def import_from_shell(self) -> int:
        """Add every definition found in the alias file to the store"""
        content = self._read(self.alias_file)
        if content is None:
            raise NotFoundError(
                "shell configuration file",
                str(self.alias_file),
                hints=["Use 'aliasctl set-file' to point at another file"],
            )
        count = 0
        for name, command in parse_lines(content.splitlines(), self.dialect):
            self.store.add(name, command, self.dialect)
            count += 1
        return count
