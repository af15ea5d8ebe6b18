from typing import Any, Dict

import pytest

from aliasctl.dialects import Dialect
from aliasctl.models import AliasRecord
from aliasctl.storage import AliasStore


@pytest.fixture(autouse=True)
def config_dir(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.config/aliasctl"""
    path = tmp_path / "config"
    monkeypatch.setenv("ALIASCTL_CONFIG_DIR", str(path))
    return path


@pytest.fixture
def record() -> AliasRecord:
    return AliasRecord(
        name="gs",
        commands={Dialect.BASH: "git status", Dialect.FISH: "git status"},
    )


@pytest.fixture
def store_data() -> Dict[str, Any]:
    return {
        "gs": {"bash": "git status", "fish": "git status"},
        "ll": {"bash": "ls -la", "powershell": "Get-ChildItem"},
    }


@pytest.fixture
def store(tmp_path) -> AliasStore:
    return AliasStore(tmp_path / "store" / "aliases.json")


@pytest.fixture
def filled_store(store) -> AliasStore:
    store.add("gs", "git status", Dialect.BASH)
    store.add("ll", "ls -la", Dialect.BASH)
    store.add("ll", "Get-ChildItem", Dialect.POWERSHELL)
    return store
