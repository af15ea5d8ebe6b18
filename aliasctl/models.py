"""Data models for aliases"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from aliasctl.dialects import Dialect


@dataclass
class AliasRecord:
    """One alias name with a command per shell dialect"""
    name: str
    commands: Dict[Dialect, str] = field(default_factory=dict)

    def get(self, dialect: Dialect) -> Optional[str]:
        """Command for dialect, or None when it has none"""
        return self.commands.get(dialect) or None

    def set(self, dialect: Dialect, command: str) -> None:
        if command:
            self.commands[dialect] = command
        else:
            self.commands.pop(dialect, None)

    def is_empty(self) -> bool:
        return not any(self.commands.values())

    def to_dict(self) -> dict:
        """Convert record to dictionary for storage, keyed by dialect name"""
        return {
            dialect.value: self.commands[dialect]
            for dialect in Dialect
            if self.commands.get(dialect)
        }

    @classmethod
    def from_dict(cls, name: str, data: dict) -> "AliasRecord":
        """Create record from dictionary, skipping unknown shells and blanks"""
        record = cls(name=name)
        for key, command in data.items():
            try:
                dialect = Dialect(key)
            except ValueError:
                continue
            if isinstance(command, str) and command:
                record.commands[dialect] = command
        return record

    def __str__(self) -> str:
        """String representation for display"""
        shells = ", ".join(f"{dialect.value}='{cmd}'" for dialect, cmd in self.commands.items())
        return f"{self.name}: {shells}"
