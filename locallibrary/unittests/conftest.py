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
Pytest configuration and shared fixtures for LocalLibrary tests.
"""

import datetime
import os
import shutil
import sys
import tempfile
from unittest.mock import Mock, patch

import pytest

# Ensure locallibrary package is importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

import locallibrary
from locallibrary.database import DBConnection
from locallibrary.database_v2 import MigrationRunner

HANDLER_MODULES = [
    'locallibrary.web.handlers.author_handler',
    'locallibrary.web.handlers.book_handler',
    'locallibrary.web.handlers.genre_handler',
    'locallibrary.web.handlers.bookinstance_handler',
    'locallibrary.web.handlers.catalog_handler',
]


@pytest.fixture(scope='session', autouse=True)
def setup_locallibrary_globals():
    """Initialize LocalLibrary global variables needed for tests."""
    locallibrary.PROG_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    locallibrary.DATADIR = tempfile.mkdtemp(prefix='ll_test_')
    locallibrary.SYS_ENCODING = 'utf-8'
    locallibrary.LOGLEVEL = 0  # Disable debug logging during tests

    if not hasattr(locallibrary, 'CONFIG') or locallibrary.CONFIG is None:
        locallibrary.CONFIG = {}

    for key, (item_type, section, default) in locallibrary.CONFIG_DEFINITIONS.items():
        locallibrary.CONFIG.setdefault(key, default)
    locallibrary.CONFIG['LOGDIR'] = os.path.join(locallibrary.DATADIR, 'Logs')
    locallibrary.CONFIG['LOGLEVEL'] = 0

    os.makedirs(locallibrary.CONFIG['LOGDIR'], exist_ok=True)

    yield

    if os.path.exists(locallibrary.DATADIR):
        shutil.rmtree(locallibrary.DATADIR, ignore_errors=True)


@pytest.fixture
def temp_db():
    """
    Create a temporary SQLite database with the catalog schema.

    Yields the path of the database. The migrations are run against it so
    the schema is exactly what a fresh install gets.
    """
    fd, db_path = tempfile.mkstemp(suffix='.db', prefix='ll_test_')
    os.close(fd)

    original_dbfile = getattr(locallibrary, 'DBFILE', None)
    locallibrary.DBFILE = db_path

    db = DBConnection()
    MigrationRunner(db, log_dir='').run()
    db.close()

    yield db_path

    locallibrary.DBFILE = original_dbfile
    for suffix in ['', '-wal', '-shm']:
        if os.path.exists(db_path + suffix):
            os.unlink(db_path + suffix)


@pytest.fixture
def capture_template():
    """
    Replace serve_template in every handler module with a Mock.

    The mock returns a fixed page, tests read the template name and the
    data bag from mock.call_args.
    """
    mock_serve = Mock(return_value='<html>rendered</html>')
    patchers = [patch('%s.serve_template' % module, mock_serve) for module in HANDLER_MODULES]
    for patcher in patchers:
        patcher.start()

    yield mock_serve

    for patcher in patchers:
        patcher.stop()


@pytest.fixture
def sample_catalog(temp_db):
    """
    A small catalog: two authors, two genres, two books, three copies.

    Returns a dict of the saved records keyed by a short name.
    """
    from locallibrary.models import Author, Book, BookInstance, Genre

    tolkien = Author(first_name='John', family_name='Tolkien',
                     date_of_birth=datetime.date(1892, 1, 3), date_of_death=datetime.date(1973, 9, 2)).save()
    austen = Author(first_name='Jane', family_name='Austen',
                    date_of_birth=datetime.date(1775, 12, 16)).save()
    fantasy = Genre(name='Fantasy').save()
    romance = Genre(name='Romance').save()
    hobbit = Book(title='The Hobbit', author_id=tolkien.id, summary='There and back again.',
                  isbn='9780261103344', genre_ids=[fantasy.id]).save()
    emma = Book(title='Emma', author_id=austen.id, summary='Handsome, clever and rich.',
                isbn='9780141439587', genre_ids=[romance.id]).save()
    copy1 = BookInstance(book_id=hobbit.id, imprint='Allen and Unwin, 1937', status='Available').save()
    copy2 = BookInstance(book_id=hobbit.id, imprint='HarperCollins, 1995', status='Loaned',
                         due_back=datetime.date(2030, 1, 5)).save()
    copy3 = BookInstance(book_id=emma.id, imprint='Penguin, 2003', status='Maintenance').save()

    return {
        'tolkien': tolkien,
        'austen': austen,
        'fantasy': fantasy,
        'romance': romance,
        'hobbit': hobbit,
        'emma': emma,
        'copy1': copy1,
        'copy2': copy2,
        'copy3': copy3,
    }


class MockLogger:
    """Mock logger for testing that captures log messages."""

    def __init__(self):
        self.debug_messages = []
        self.info_messages = []
        self.warn_messages = []
        self.error_messages = []

    def debug(self, msg):
        self.debug_messages.append(msg)

    def info(self, msg):
        self.info_messages.append(msg)

    def warn(self, msg):
        self.warn_messages.append(msg)

    def error(self, msg):
        self.error_messages.append(msg)


@pytest.fixture
def mock_logger(monkeypatch):
    """
    Replace the logger used by the web error page with a mock.

    Returns the mock logger instance so tests can inspect logged messages.
    """
    mock = MockLogger()
    monkeypatch.setattr('locallibrary.webServe.logger', mock)
    return mock
