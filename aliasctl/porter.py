import json
import yaml
from pathlib import Path
from datetime import datetime
from typing import List, Dict, Any, Optional, Tuple

from aliasctl.dialects import Dialect
from aliasctl.models import AliasRecord
from aliasctl.storage import AliasStore

YAML_SUFFIXES = (".yaml", ".yml")
DOCUMENT_VERSION = "1.0"


def _is_yaml(filepath: Path, format: Optional[str] = None) -> bool:
    if format:
        return format == "yaml"
    return filepath.suffix.lower() in YAML_SUFFIXES


class AliasPorter:
    """Save the whole alias collection to a file and load it back"""

    def __init__(self, store: AliasStore):
        self.store = store

    def export_to_dict(self, records: Optional[List[AliasRecord]] = None,
                       dialect: Optional[Dialect] = None) -> Dict[str, Any]:
        if records is None:
            records = self.store.list_all()
        if dialect:
            records = [record for record in records if record.get(dialect)]

        document = {
            "version": DOCUMENT_VERSION,
            "exported_at": datetime.now().isoformat(),
            "count": len(records),
            "aliases": {record.name: record.to_dict() for record in records},
        }
        if dialect:
            document["shell_filter"] = dialect.value
        return document

    def _write_document(self, filepath: Path, document: Dict[str, Any], as_yaml: bool) -> None:
        with open(filepath, "w") as f:
            if as_yaml:
                yaml.dump(document, f, default_flow_style=False, sort_keys=False)
            else:
                json.dump(document, f, indent=2, default=str)

    def _read_document(self, filepath: Path) -> Any:
        with open(filepath, "r") as f:
            if _is_yaml(filepath):
                return yaml.safe_load(f)
            return json.load(f)

    def export_to_file(self, filepath: Path, format: Optional[str] = None,
                       dialect: Optional[Dialect] = None) -> Tuple[bool, str]:
        """Write the collection as JSON or YAML (picked from the suffix by default)"""
        document = self.export_to_dict(dialect=dialect)
        try:
            self._write_document(filepath, document, _is_yaml(filepath, format))
        except OSError as e:
            return False, f"Export failed: {e}"

        message = f"Exported {document['count']} aliases to {filepath.name}"
        if dialect:
            message += f" (filtered by shell: {dialect.value})"
        return True, message

    def import_from_file(self, filepath: Path, merge: bool = False) -> Tuple[bool, str]:
        """Load a collection into the store. The caller saves the store."""
        if not filepath.exists():
            return False, f"File not found: {filepath}"
        try:
            document = self._read_document(filepath)
        except (OSError, ValueError, yaml.YAMLError) as e:
            return False, f"Import failed: {e}"

        entries = document.get("aliases") if isinstance(document, dict) else None
        if not isinstance(entries, dict):
            return False, "Invalid format: missing 'aliases' field"

        if not merge:
            self.store.aliases = {}

        records = [
            AliasRecord.from_dict(name, data if isinstance(data, dict) else {})
            for name, data in entries.items()
        ]
        loaded = [record for record in records if not record.is_empty()]
        for record in loaded:
            for dialect, command in record.commands.items():
                self.store.add(record.name, command, dialect)

        message = f"Imported {len(loaded)} aliases"
        skipped = len(records) - len(loaded)
        if skipped:
            message += f" (skipped {skipped} without commands)"
        return True, message
