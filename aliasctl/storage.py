import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional, Dict, Tuple
from datetime import datetime

from aliasctl.dialects import Dialect
from aliasctl.errors import StorageError
from aliasctl.models import AliasRecord


class AliasStore:
    """Handle storage and retrieval of alias records"""

    def __init__(self, storage_path: Path, auto_backup: bool = True, max_backups: int = 10):
        self.storage_path = storage_path
        self.backup_dir = self.storage_path.parent / "backups"
        self.auto_backup = auto_backup
        self.max_backups = max_backups
        self.aliases: Dict[str, AliasRecord] = {}

    def create_backup(self) -> Optional[Path]:
        """Create timestamped backup of the current store file"""
        if not self.storage_path.exists():
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        backup_path = self.backup_dir / f"aliases_{timestamp}.json"

        self.backup_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(self.storage_path, backup_path)
        self.cleanup_old_backups(keep=self.max_backups)
        return backup_path

    def cleanup_old_backups(self, keep: int = 10) -> None:
        """Remove old backups, keeping only the most recent ones"""
        backups = sorted(self.backup_dir.glob("aliases_*.json"))
        if len(backups) > keep:
            for backup in backups[:-keep]:
                backup.unlink()

    def load(self) -> "AliasStore":
        """Load alias records from the JSON file; a missing file is an empty store"""
        if not self.storage_path.exists():
            self.aliases = {}
            return self

        try:
            with open(self.storage_path, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(
                f"alias store {self.storage_path} is not valid JSON",
                cause=e,
                hints=["Run 'aliasctl restore' to bring back the latest backup",
                       "Or import a saved copy with 'aliasctl import-store'"],
            )
        except OSError as e:
            raise StorageError(f"cannot read alias store {self.storage_path}", cause=e)

        if not isinstance(data, dict):
            raise StorageError(f"alias store {self.storage_path} must contain a JSON object")

        aliases = {}
        for name, record_data in data.items():
            if not isinstance(record_data, dict):
                continue
            record = AliasRecord.from_dict(name, record_data)
            if not record.is_empty():
                aliases[name] = record
        self.aliases = aliases
        return self

    def to_dict(self) -> dict:
        return {
            name: self.aliases[name].to_dict()
            for name in sorted(self.aliases)
            if not self.aliases[name].is_empty()
        }

    def save(self) -> None:
        """Save the whole store, replacing the file in one step"""
        try:
            self.storage_path.parent.mkdir(parents=True, exist_ok=True)
            if self.auto_backup:
                self.create_backup()

            fd, tmp_name = tempfile.mkstemp(
                dir=self.storage_path.parent, prefix=".aliases-", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, 'w') as f:
                    json.dump(self.to_dict(), f, indent=2)
                    f.write("\n")
                os.replace(tmp_name, self.storage_path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(
                f"cannot save alias store {self.storage_path}",
                cause=e,
                hints=["Check that you have write permission to this directory"],
            )

    def add(self, name: str, command: str, dialect: Dialect) -> AliasRecord:
        """Set the command of name for dialect, creating the record if needed"""
        record = self.aliases.get(name) or AliasRecord(name=name)
        record.set(dialect, command)
        if record.is_empty():
            self.aliases.pop(name, None)
        else:
            self.aliases[name] = record
        return record

    def remove(self, name: str) -> bool:
        """Remove an alias with all its shell commands, return True if it existed"""
        if name in self.aliases:
            del self.aliases[name]
            return True
        return False

    def get(self, name: str) -> Optional[AliasRecord]:
        """Get an alias record by name"""
        return self.aliases.get(name)

    def list(self, dialect: Dialect) -> List[Tuple[str, str]]:
        """(name, command) for every alias defined for dialect"""
        return [
            (name, record.get(dialect))
            for name, record in self.aliases.items()
            if record.get(dialect)
        ]

    def list_all(self) -> List[AliasRecord]:
        """Get all alias records as a list"""
        return list(self.aliases.values())

    def names(self) -> List[str]:
        return list(self.aliases)

    def restore_latest_backup(self) -> bool:
        """Restore from the most recent backup"""
        backups = sorted(self.backup_dir.glob("aliases_*.json"))
        if backups:
            latest_backup = backups[-1]
            shutil.copy2(latest_backup, self.storage_path)
            self.load()
            return True
        return False

    def __contains__(self, name: str) -> bool:
        return name in self.aliases

    def __len__(self) -> int:
        return len(self.aliases)
