#  This file is part of LocalLibrary.
#
#  LocalLibrary is free software: you can redistribute it and/or modify
#  it under the terms of the GNU General Public License as published by
#  the Free Software Foundation, either version 3 of the License, or
#  (at your option) any later version.
#
#  LocalLibrary is distributed in the hope that it will be useful,
#  but WITHOUT ANY WARRANTY; without even the implied warranty of
#  MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#  GNU General Public License for more details.
#
#  You should have received a copy of the GNU General Public License
#  along with LocalLibrary.  If not, see <http://www.gnu.org/licenses/>.

"""
Unit tests for locallibrary.logger module.

Tests cover:
- Log level gating of debug and info
- Log file creation by initLogger
- Caller info and the windows accent filter
"""

import logging
import os
import tempfile
from unittest.mock import patch

import pytest

import locallibrary
from locallibrary import logger


@pytest.fixture
def logger_config():
    """Point the logger at a temporary directory."""
    original_config = dict(locallibrary.CONFIG)
    original_loglevel = locallibrary.LOGLEVEL

    with tempfile.TemporaryDirectory() as tmpdir:
        locallibrary.CONFIG['LOGDIR'] = tmpdir
        locallibrary.CONFIG['LOGSIZE'] = 204800
        locallibrary.CONFIG['LOGFILES'] = 5
        locallibrary.LOGLEVEL = 1

        yield tmpdir

        logger.locallibrary_log.stopLogger()

    locallibrary.CONFIG.clear()
    locallibrary.CONFIG.update(original_config)
    locallibrary.LOGLEVEL = original_loglevel


class TestLoggerFunctions:
    """Tests for logger module functions."""

    def test_debug_suppressed_below_level_2(self, logger_config):
        """debug() should not log when LOGLEVEL is 1."""
        with patch.object(logger.locallibrary_log, 'log') as mock_log:
            logger.debug('hidden')
            mock_log.assert_not_called()

    def test_debug_logged_at_level_2(self, logger_config):
        locallibrary.LOGLEVEL = 2
        with patch.object(logger.locallibrary_log, 'log') as mock_log:
            logger.debug('shown')
            mock_log.assert_called_once_with('shown', level='DEBUG')

    def test_info_suppressed_when_quiet(self, logger_config):
        """info() should not log when LOGLEVEL is 0."""
        locallibrary.LOGLEVEL = 0
        with patch.object(logger.locallibrary_log, 'log') as mock_log:
            logger.info('hidden')
            mock_log.assert_not_called()

    def test_warn_and_error_always_logged(self, logger_config):
        locallibrary.LOGLEVEL = 0
        with patch.object(logger.locallibrary_log, 'log') as mock_log:
            logger.warn('careful')
            logger.error('broken')
            assert mock_log.call_count == 2
            mock_log.assert_any_call('careful', level='WARNING')
            mock_log.assert_any_call('broken', level='ERROR')


class TestRotatingLogger:
    """Tests for RotatingLogger."""

    def test_init_logger_creates_log_file(self, logger_config):
        """initLogger should write to locallibrary.log in LOGDIR."""
        logger.locallibrary_log.initLogger(loglevel=0)
        logger.error('something failed')
        logger.locallibrary_log.filehandler.flush()

        logfile = os.path.join(logger_config, 'locallibrary.log')
        assert os.path.exists(logfile)
        with open(logfile) as f:
            content = f.read()
        assert 'something failed' in content
        assert 'ERROR' in content
        assert 'test_logger.py:test_init_logger_creates_log_file:' in content

    def test_message_carries_caller(self, logger_config):
        """log() should pass file, function and line of the code that logged."""
        with patch.object(logging.getLogger('locallibrary'), 'log') as mock_log:
            logger.info('hello')
        level, message = mock_log.call_args[0]
        assert level == logging.INFO
        assert message == 'hello'
        caller = mock_log.call_args[1]['extra']['caller']
        assert caller.startswith('test_logger.py:test_message_carries_caller:')

    def test_unaccented_filter(self):
        record = logging.LogRecord('locallibrary', logging.INFO, __file__, 1, 'Café %s', ('olé',), None)
        assert logger.UnaccentedFilter().filter(record)
        assert record.getMessage() == 'Cafe ole'

    def test_stop_logger_removes_handlers(self, logger_config):
        logger.locallibrary_log.initLogger(loglevel=1)
        assert logger.locallibrary_log.consolehandler is not None
        logger.locallibrary_log.stopLogger()
        assert logger.locallibrary_log.filehandler is None
        assert logger.locallibrary_log.consolehandler is None
