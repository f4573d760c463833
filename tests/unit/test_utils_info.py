"""
Unit tests for package information utilities.

Tests the information collection behind the loom-info command.
"""

import pytest
import platform
import sys
from unittest.mock import patch
from loom.utils.info import get_system_info, get_loom_info, print_info, main


class TestSystemInfo:
    """Test system information collection."""

    def test_get_system_info_basic(self):
        """Test getting basic system information."""
        info = get_system_info()

        assert info['python_version'] == sys.version
        assert info['platform'] == platform.platform()
        assert info['architecture'] == platform.architecture()
        assert 'yaml_version' in info
        assert isinstance(info['yaml_libyaml'], bool)


class TestLoomInfo:
    """Test loom-specific information collection."""

    @patch('loom.__version__', '1.0.0')
    @patch('loom.__author__', 'Test Author')
    def test_get_loom_info_basic(self):
        info = get_loom_info()

        assert info['version'] == '1.0.0'
        assert info['author'] == 'Test Author'
        assert 'Python' in info['languages']
        assert info['config_file'] is None
        assert info['default_language'] == 'Python'
        assert info['debug_enabled'] is False
        assert isinstance(info['registered_sources'], int)

    def test_get_loom_info_config_error(self, tmp_path, monkeypatch):
        """A broken configuration file is reported instead of raised."""
        broken = tmp_path / 'loom.yaml'
        broken.write_text('- not a mapping\n', encoding='utf-8')
        monkeypatch.setenv('LOOM_CONFIG', str(broken))

        info = get_loom_info()

        assert 'config_error' in info
        assert 'mapping' in info['config_error']


class TestPrintInfo:
    """Test formatted output."""

    def test_print_info(self, capsys):
        print_info()
        output = capsys.readouterr().out

        assert 'loom Text Template Engine' in output
        assert 'Languages: Python' in output
        assert 'Configuration File: defaults' in output
        assert 'PyYAML Version:' in output

    def test_main_reports_errors(self, capsys):
        with patch('loom.utils.info.print_info', side_effect=RuntimeError('broken')):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1
        assert 'broken' in capsys.readouterr().out
