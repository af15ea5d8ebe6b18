import pytest
from unittest.mock import patch
from pathlib import Path

from aliasctl.dialects import Dialect
from aliasctl.shell_detector import ShellDetector


@pytest.fixture
def shell_detector(tmp_path):
    """Fixture for ShellDetector with a temporary home"""
    return ShellDetector(home_dir=tmp_path / "home")


@pytest.fixture
def isolated_shell_detector(shell_detector):
    """ShellDetector with every detection source switched off"""
    with patch.dict('os.environ', {}, clear=True), \
         patch('aliasctl.shell_detector.sys.platform', 'linux'), \
         patch('pwd.getpwuid', side_effect=KeyError), \
         patch('psutil.Process', side_effect=ImportError):
        yield shell_detector


class TestShellDetector:
    """Unit tests for shell detection and default alias files"""

    def test_init_without_home_dir(self):
        with patch('pathlib.Path.home', return_value=Path('/mock/home')):
            assert ShellDetector().home_dir == Path('/mock/home')

    @pytest.mark.parametrize("shell_env,expected", [
        ("/bin/zsh", Dialect.ZSH),
        ("/usr/bin/bash", Dialect.BASH),
        ("/usr/local/bin/fish", Dialect.FISH),
        ("/bin/ksh93", Dialect.KSH),
        ("/usr/bin/pwsh", Dialect.PWSH),
        ("/bin/sh", Dialect.BASH),
    ])
    def test_detect_via_shell_env(self, isolated_shell_detector, shell_env, expected):
        """SHELL wins over every other source"""
        with patch.dict('os.environ', {'SHELL': shell_env}):
            assert isolated_shell_detector.detect_current_dialect() == expected

    def test_detect_via_passwd(self, isolated_shell_detector):
        with patch('pwd.getpwuid') as mock_pwd:
            mock_pwd.return_value.pw_shell = '/usr/bin/fish'
            assert isolated_shell_detector.detect_current_dialect() == Dialect.FISH

    @pytest.mark.parametrize("env,expected", [
        ({'ZSH_VERSION': '5.9'}, Dialect.ZSH),
        ({'FISH_VERSION': '3.7'}, Dialect.FISH),
        ({'BASH_VERSION': '5.2'}, Dialect.BASH),
    ])
    def test_detect_via_version_variables(self, isolated_shell_detector, env, expected):
        with patch.dict('os.environ', env):
            assert isolated_shell_detector.detect_current_dialect() == expected

    @pytest.mark.parametrize("process_name,expected", [
        ("zsh", Dialect.ZSH),
        ("-fish", Dialect.FISH),
        ("pwsh", Dialect.PWSH),
    ])
    def test_detect_via_parent_process(self, isolated_shell_detector, process_name, expected):
        with patch('psutil.Process') as mock_process:
            mock_process.return_value.name.return_value = process_name
            assert isolated_shell_detector.detect_current_dialect() == expected

    def test_detect_defaults_to_bash(self, isolated_shell_detector):
        assert isolated_shell_detector.detect_current_dialect() == Dialect.BASH

    def test_detect_windows_parent_cmd(self, shell_detector):
        with patch('aliasctl.shell_detector.sys.platform', 'win32'), \
             patch('psutil.Process') as mock_process:
            mock_process.return_value.name.return_value = "cmd.exe"
            assert shell_detector.detect_current_dialect() == Dialect.CMD

    def test_detect_windows_prefers_pwsh_when_installed(self, shell_detector, tmp_path):
        (tmp_path / "Program Files" / "PowerShell" / "7").mkdir(parents=True)
        with patch('aliasctl.shell_detector.sys.platform', 'win32'), \
             patch('psutil.Process', side_effect=ImportError), \
             patch.dict('os.environ', {'ProgramFiles': str(tmp_path / "Program Files")}, clear=True):
            assert shell_detector.detect_current_dialect() == Dialect.PWSH

    def test_detect_windows_fallback(self, shell_detector):
        with patch('aliasctl.shell_detector.sys.platform', 'win32'), \
             patch('psutil.Process', side_effect=OSError), \
             patch.dict('os.environ', {}, clear=True):
            assert shell_detector.detect_current_dialect() == Dialect.POWERSHELL

    @pytest.mark.parametrize("dialect,relative", [
        (Dialect.BASH, ".bash_aliases"),
        (Dialect.ZSH, ".zshrc"),
        (Dialect.FISH, ".config/fish/config.fish"),
        (Dialect.KSH, ".kshrc"),
        (Dialect.PWSH, "Documents/PowerShell/Microsoft.PowerShell_profile.ps1"),
        (Dialect.CMD, "aliasctl_macros.cmd"),
    ])
    def test_default_alias_file(self, shell_detector, dialect, relative):
        assert shell_detector.default_alias_file(dialect) == shell_detector.home_dir / relative
