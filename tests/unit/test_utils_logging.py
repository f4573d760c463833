"""
Unit tests for logging utilities.

Tests the logging configuration and utilities including logger setup,
formatting and the pipeline logging helpers.
"""

import pytest
import logging
import os
import tempfile
from unittest.mock import Mock, patch
from loom.utils.logging import setup_logging, get_logger, LoomLogger


@pytest.fixture(autouse=True)
def restore_logging(monkeypatch):
    """Reset the loom logger to its import-time configuration after each test."""
    monkeypatch.delenv('LOOM_LOG_LEVEL', raising=False)
    yield
    setup_logging(level='WARNING')


class TestLoggingSetup:
    """Test logging setup and configuration."""

    def test_setup_logging_default(self):
        """Test default logging setup."""
        setup_logging()

        logger = logging.getLogger('loom')
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    @pytest.mark.parametrize('level', ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    def test_setup_logging_levels(self, level):
        """Test each named logging level."""
        setup_logging(level=level)
        assert logging.getLogger('loom').level == getattr(logging, level)

    def test_setup_logging_lowercase_level(self):
        setup_logging(level='debug')
        assert logging.getLogger('loom').level == logging.DEBUG

    def test_setup_logging_invalid_level(self):
        """Test logging setup with invalid level defaults to WARNING."""
        setup_logging(level='INVALID')
        assert logging.getLogger('loom').level == logging.WARNING

    def test_setup_logging_environment_variable(self):
        """Test logging setup with environment variable."""
        with patch.dict('os.environ', {'LOOM_LOG_LEVEL': 'DEBUG'}):
            setup_logging()
            assert logging.getLogger('loom').level == logging.DEBUG

    def test_setup_logging_with_file(self):
        """Test logging setup with file output."""
        with tempfile.NamedTemporaryFile(suffix='.log', delete=False) as f:
            log_file = f.name

        try:
            setup_logging(level='INFO', log_file=log_file)

            logger = logging.getLogger('loom')
            handler_types = [type(h).__name__ for h in logger.handlers]
            assert 'StreamHandler' in handler_types
            assert 'FileHandler' in handler_types

            get_logger('test_formatter').info('Test message for formatting')

            with open(log_file, 'r', encoding='utf-8') as f:
                content = f.read()
            assert 'loom.test_formatter' in content
            assert 'INFO' in content
            assert 'Test message for formatting' in content
        finally:
            setup_logging(level='WARNING')
            if os.path.exists(log_file):
                os.unlink(log_file)

    def test_setup_logging_removes_existing_handlers(self):
        """Test that setup_logging removes existing handlers."""
        logger = logging.getLogger('loom')
        dummy_handler = logging.StreamHandler()
        logger.addHandler(dummy_handler)

        setup_logging()

        assert dummy_handler not in logger.handlers
        assert len(logger.handlers) == 1


class TestGetLogger:
    """Test logger naming."""

    def test_get_logger(self):
        """Test getting logger instances."""
        logger1 = get_logger('test_module')
        logger2 = get_logger('test_module')

        assert logger1 is logger2
        assert logger1.name == 'loom.test_module'

    def test_package_module_names_kept(self):
        """Module ``__name__`` values are already under the loom hierarchy."""
        assert get_logger('loom.transformer').name == 'loom.transformer'
        assert get_logger('loom').name == 'loom'

    def test_similar_prefix_is_nested(self):
        assert get_logger('loomish').name == 'loom.loomish'

    def test_logger_hierarchy(self):
        child_logger = get_logger('parent.child')
        assert child_logger.name == 'loom.parent.child'
        assert child_logger.parent.name.startswith('loom')


class TestLoomLogger:
    """Test LoomLogger pipeline helpers."""

    def test_loom_logger_creation(self):
        component = LoomLogger('test_component')
        assert component.logger.name == 'loom.test_component'
        assert isinstance(component.logger, logging.Logger)

    @patch('loom.utils.logging.get_logger')
    def test_log_transform_start(self, mock_get_logger):
        """Test logging the start of a transformation."""
        mock_logger = Mock()
        mock_get_logger.return_value = mock_logger

        LoomLogger('test').log_transform_start('page.tt', 120)

        mock_logger.info.assert_called_once()
        call_args = mock_logger.info.call_args[0][0]
        assert 'Transforming template page.tt' in call_args
        assert '120 chars' in call_args

    @patch('loom.utils.logging.get_logger')
    def test_log_transform_start_without_path(self, mock_get_logger):
        mock_logger = Mock()
        mock_get_logger.return_value = mock_logger

        LoomLogger('test').log_transform_start('', 3)

        assert '<text>' in mock_logger.info.call_args[0][0]

    @patch('loom.utils.logging.get_logger')
    def test_log_fragments(self, mock_get_logger):
        mock_logger = Mock()
        mock_get_logger.return_value = mock_logger

        LoomLogger('test').log_fragments('page.tt', 7)

        mock_logger.debug.assert_called_once()
        assert 'Scanned 7 fragments from page.tt' in mock_logger.debug.call_args[0][0]

    @patch('loom.utils.logging.get_logger')
    def test_log_include(self, mock_get_logger):
        mock_logger = Mock()
        mock_get_logger.return_value = mock_logger

        LoomLogger('test').log_include('a.tt', 'b.tt')

        call_args = mock_logger.debug.call_args[0][0]
        assert 'Including b.tt from a.tt' in call_args

    @patch('loom.utils.logging.get_logger')
    def test_log_diagnostic_error(self, mock_get_logger):
        """Errors are logged at error level."""
        mock_logger = Mock()
        mock_get_logger.return_value = mock_logger

        LoomLogger('test').log_diagnostic('page.tt', 3, 'SyntaxError', 'invalid syntax', True)

        mock_logger.error.assert_called_once_with('page.tt(3): error SyntaxError: invalid syntax')
        mock_logger.warning.assert_not_called()

    @patch('loom.utils.logging.get_logger')
    def test_log_diagnostic_warning(self, mock_get_logger):
        """Warnings are logged at warning level."""
        mock_logger = Mock()
        mock_get_logger.return_value = mock_logger

        LoomLogger('test').log_diagnostic('page.tt', 4, 'SyntaxWarning', 'odd', False)

        mock_logger.warning.assert_called_once_with('page.tt(4): warning SyntaxWarning: odd')
        mock_logger.error.assert_not_called()

    @patch('loom.utils.logging.get_logger')
    def test_log_performance_metrics(self, mock_get_logger):
        """Test logging performance metrics."""
        mock_logger = Mock()
        mock_get_logger.return_value = mock_logger

        LoomLogger('test').log_performance_metrics(0.25, 1.5, 0.1)

        call_args = mock_logger.info.call_args[0][0]
        assert 'Performance:' in call_args
        assert 'parse=0.250s' in call_args
        assert 'compile=1.500s' in call_args
        assert 'execution=0.100s' in call_args

    def test_multiple_components_logging(self):
        """Test logging from multiple components."""
        component1 = LoomLogger('component1')
        component2 = LoomLogger('component2')

        with patch.object(component1.logger, 'info') as mock_info1:
            with patch.object(component2.logger, 'info') as mock_info2:
                component1.log_performance_metrics(1.0, 0.5, 0.1)
                component2.log_performance_metrics(2.0, 1.0, 0.2)

                mock_info1.assert_called_once()
                mock_info2.assert_called_once()


if __name__ == '__main__':
    pytest.main([__file__])
