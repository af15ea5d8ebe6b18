"""Shell detection and default alias file locations"""

import os
import sys
from pathlib import Path
from typing import Optional

from aliasctl.dialects import Dialect


class ShellDetector:
    """Detect the user's shell dialect and where its aliases should live"""

    ALIAS_FILES = {
        Dialect.BASH: ".bash_aliases",
        Dialect.ZSH: ".zshrc",
        Dialect.FISH: ".config/fish/config.fish",
        Dialect.KSH: ".kshrc",
        Dialect.POWERSHELL: "Documents/WindowsPowerShell/Microsoft.PowerShell_profile.ps1",
        Dialect.PWSH: "Documents/PowerShell/Microsoft.PowerShell_profile.ps1",
        Dialect.CMD: "aliasctl_macros.cmd",
    }

    def __init__(self, home_dir: Optional[Path] = None):
        """Initialize detector with home directory"""
        self.home_dir = home_dir or Path.home()

    @staticmethod
    def _from_name(shell: str) -> Optional[Dialect]:
        shell = shell.lower()
        for name in ("zsh", "fish", "ksh", "bash", "pwsh", "powershell"):
            if name in shell:
                return Dialect(name)
        if shell.endswith("sh"):
            return Dialect.BASH
        return None

    def detect_current_dialect(self) -> Dialect:
        """Detect the current shell from the environment, defaulting to bash"""
        if sys.platform == "win32":
            return self._detect_windows()

        # Method 1: SHELL environment variable
        shell_env = os.environ.get("SHELL", "")
        if shell_env:
            dialect = self._from_name(shell_env)
            if dialect:
                return dialect

        # Method 2: the user's login shell from /etc/passwd
        try:
            import pwd

            dialect = self._from_name(pwd.getpwuid(os.getuid()).pw_shell)
            if dialect:
                return dialect
        except (ImportError, KeyError, AttributeError, OSError):
            pass

        # Method 3: shell-specific environment variables
        if os.environ.get("ZSH_NAME") or os.environ.get("ZSH_VERSION"):
            return Dialect.ZSH
        if os.environ.get("FISH_VERSION"):
            return Dialect.FISH
        if os.environ.get("BASH_VERSION"):
            return Dialect.BASH

        # Method 4: parent process name
        dialect = self._from_parent_process()
        if dialect:
            return dialect

        return Dialect.BASH

    def _detect_windows(self) -> Dialect:
        dialect = self._from_parent_process()
        if dialect:
            return dialect
        program_files = os.environ.get("ProgramFiles", "")
        if program_files and (Path(program_files) / "PowerShell" / "7").exists():
            return Dialect.PWSH
        return Dialect.POWERSHELL

    def _from_parent_process(self) -> Optional[Dialect]:
        try:
            import psutil

            parent_name = psutil.Process(os.getppid()).name().lower()
        except (ImportError, Exception):
            return None
        parent_name = parent_name.lstrip("-").removesuffix(".exe")
        if parent_name == "cmd":
            return Dialect.CMD
        if parent_name in Dialect.names():
            return Dialect(parent_name)
        return None

    def default_alias_file(self, dialect: Dialect) -> Path:
        """Where aliases for dialect go when the user has not chosen a file"""
        return self.home_dir / self.ALIAS_FILES[dialect]
