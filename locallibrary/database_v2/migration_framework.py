#  This file is part of LocalLibrary.
#  LocalLibrary is free software: you can redistribute it and/or modify
#  it under the terms of the GNU General Public License as published by
#  the Free Software Foundation, either version 3 of the License, or
#  (at your option) any later version.
#  LocalLibrary is distributed in the hope that it will be useful,
#  but WITHOUT ANY WARRANTY; without even the implied warranty of
#  MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#  GNU General Public License for more details.
#  You should have received a copy of the GNU General Public License
#  along with LocalLibrary.  If not, see <http://www.gnu.org/licenses/>.

"""
Schema migrations for the catalog database.

Each migration is a numbered class with an up() step. The schema version
is kept in PRAGMA user_version, a new database is at 0, and on startup
every registered migration numbered above the stored version is applied
in order before the version is moved forward.
"""

import os
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, TextIO, Type

import locallibrary
from locallibrary import logger
from locallibrary.formatter import check_int


class MigrationError(Exception):
    """A migration could not be registered or applied."""
    pass


class Migration(ABC):
    """One schema step, subclasses set version and implement up()."""

    version: int = 0
    description: str = ""

    def __init__(self, db: Any, upgrade_log: Optional[TextIO] = None):
        self.db = db
        self.upgrade_log = upgrade_log

    def log(self, message: str) -> None:
        line = "%s v%d: %s" % (time.ctime(), self.version, message)
        logger.debug(line)
        if self.upgrade_log:
            self.upgrade_log.write(line + "\n")

    def _exists(self, kind: str, name: str) -> bool:
        return bool(self.db.match("SELECT name FROM sqlite_master WHERE type=? AND name=?", [kind, name]))

    def has_table(self, table: str) -> bool:
        return self._exists('table', table)

    def has_index(self, index_name: str) -> bool:
        return self._exists('index', index_name)

    def create_index(self, table: str, columns: List[str], index_name: Optional[str] = None) -> bool:
        """Index table on columns, named <table>_<columns>_index unless given.

        Returns False if the index was already there.
        """
        column_str = ', '.join(columns)
        index_name = index_name or '%s_%s_index' % (table, '_'.join(columns))
        if self.has_index(index_name):
            return False
        self.db.action('CREATE INDEX %s ON %s (%s)' % (index_name, table, column_str))
        self.log("Created index %s on %s(%s)" % (index_name, table, column_str))
        return True

    @abstractmethod
    def up(self) -> None:
        pass


class MigrationRegistry:
    """Every known migration class, keyed by version."""

    _migrations: Dict[int, Type[Migration]] = {}

    @classmethod
    def register(cls, migration_class: Type[Migration]) -> Type[Migration]:
        version = migration_class.version
        if version < 1:
            raise MigrationError("%s needs a version of 1 or more, not %d" % (migration_class.__name__, version))
        existing = cls._migrations.get(version)
        if existing:
            raise MigrationError("Version %d is used by both %s and %s" %
                                 (version, existing.__name__, migration_class.__name__))
        cls._migrations[version] = migration_class
        return migration_class

    @classmethod
    def get(cls, version: int) -> Optional[Type[Migration]]:
        return cls._migrations.get(version)

    @classmethod
    def get_versions(cls) -> List[int]:
        return sorted(cls._migrations)


def migration(version: int, description: str = "") -> Callable[[Type[Migration]], Type[Migration]]:
    """Class decorator, numbers and registers a Migration.

    @migration(2, "Add publisher to books")
    class AddPublisher(Migration):
        ...
    """
    def decorator(cls: Type[Migration]) -> Type[Migration]:
        cls.version = version
        cls.description = description
        return MigrationRegistry.register(cls)
    return decorator


class MigrationRunner:
    """Brings a database up to the newest registered version.

    Progress is logged, and also appended to dbupgrade.log when log_dir
    (LOGDIR by default) is an existing directory.
    """

    def __init__(self, db: Any, log_dir: Optional[str] = None):
        self.db = db
        self.log_dir = locallibrary.CONFIG.get('LOGDIR', '') if log_dir is None else log_dir
        self.upgrade_log = None

    def _note(self, msg: str, error: bool = False) -> None:
        if error:
            logger.error(msg)
        else:
            logger.info(msg)
        if self.upgrade_log:
            self.upgrade_log.write("%s: %s\n" % (time.ctime(), msg))

    def get_current_version(self) -> int:
        result = self.db.match('PRAGMA user_version')
        if result:
            return check_int(result[0], 0)
        return 0

    def set_version(self, version: int) -> None:
        self.db.action('PRAGMA user_version=%d' % version)

    def get_pending_migrations(self) -> List[Type[Migration]]:
        current = self.get_current_version()
        return [MigrationRegistry.get(v) for v in MigrationRegistry.get_versions() if v > current]

    def needs_upgrade(self) -> bool:
        return bool(self.get_pending_migrations())

    def run(self) -> bool:
        """Apply every pending migration, then store the new version.

        Raises:
            MigrationError: on the first migration that fails, the stored
            version is left where it was
        """
        pending = self.get_pending_migrations()
        if not pending:
            logger.debug("No migrations to run")
            return True

        current = self.get_current_version()
        target = pending[-1].version

        if self.log_dir and os.path.isdir(self.log_dir):
            self.upgrade_log = open(os.path.join(self.log_dir, 'dbupgrade.log'), 'a')
        try:
            self._note('Updating database from version %d to %d' % (current, target))
            for migration_class in pending:
                self._apply(migration_class)
            self.set_version(target)
            self._note('Database updated to version %d' % target)
            return True
        finally:
            if self.upgrade_log:
                self.upgrade_log.close()
                self.upgrade_log = None

    def _apply(self, migration_class: Type[Migration]) -> None:
        step = migration_class(self.db, upgrade_log=self.upgrade_log)
        self._note('Running migration v%d: %s' % (step.version, step.description or 'No description'))
        try:
            step.up()
        except Exception as e:
            msg = 'Migration v%d failed: %s %s' % (step.version, type(e).__name__, str(e))
            self._note(msg, error=True)
            raise MigrationError(msg) from e
        step.log("complete")
