#  This file is part of LocalLibrary.
#
#  LocalLibrary is free software':'you can redistribute it and/or modify
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

import sqlite3
import threading
import time

import locallibrary
from locallibrary import logger

db_lock = threading.Lock()


class DBConnection:
    def __init__(self):
        self.connection = sqlite3.connect(locallibrary.DBFILE, 20)
        # WAL lets the parallel readers run alongside a writer
        self.connection.execute("PRAGMA journal_mode = WAL")
        # sync less often as using WAL mode
        self.connection.execute("PRAGMA synchronous = NORMAL")
        # 32mb of cache
        self.connection.execute("PRAGMA cache_size=-%s" % (32 * 1024))
        # for cascade deletes
        self.connection.execute("PRAGMA foreign_keys = ON")
        self.connection.row_factory = sqlite3.Row

    def close(self):
        self.connection.close()

    # wrapper function with lock
    def action(self, query, args=None, suppress=None):
        if not query:
            return None
        with db_lock:
            return self._action(query, args, suppress)

    # do not use directly, use through action() which adds the lock
    def _action(self, query, args=None, suppress=None):
        sqlResult = None
        attempt = 0

        if locallibrary.LOGLEVEL & locallibrary.log_dbcomms:
            logger.debug('%s %s' % (query, str(args) if args else ''))

        while attempt < 5:
            try:
                if not args:
                    sqlResult = self.connection.execute(query)
                else:
                    sqlResult = self.connection.execute(query, args)
                self.connection.commit()
                break

            except sqlite3.OperationalError as e:
                if "unable to open database file" in str(e) or "database is locked" in str(e):
                    logger.warn('Database Error: %s' % e)
                    logger.debug("Attempted db query: [%s]" % query)
                    attempt += 1
                    if attempt == 5:
                        logger.error("Failed db query: [%s]" % query)
                        raise
                    time.sleep(1)
                else:
                    logger.error('Database error: %s' % e)
                    logger.error("Failed query: [%s]" % query)
                    raise

            except sqlite3.IntegrityError as e:
                # the python interface to sqlite only returns english text messages, not error codes
                msg = str(e).lower()
                if suppress and 'UNIQUE' in suppress and ('not unique' in msg or 'unique constraint failed' in msg):
                    if locallibrary.LOGLEVEL & locallibrary.log_dbcomms:
                        logger.debug('Suppressed [%s] %s' % (query, e))
                        logger.debug("Suppressed args: [%s]" % str(args))
                    self.connection.commit()
                    break
                else:
                    logger.error('Database Integrity error: %s' % e)
                    logger.error("Failed query: [%s]" % query)
                    logger.error("Failed args: [%s]" % str(args))
                    raise

            except sqlite3.DatabaseError as e:
                logger.error('Fatal error executing %s :: %s' % (query, e))
                raise

        return sqlResult

    def match(self, query, args=None):
        try:
            # if there are no results, action() returns None and .fetchone() fails
            sqlResults = self.action(query, args).fetchone()
        except sqlite3.Error:
            return []
        if not sqlResults:
            return []

        return sqlResults

    # fetch_one() and fetch_all() let errors through, match() swallows them
    def fetch_one(self, query, args=None):
        return self.action(query, args).fetchone()

    def fetch_all(self, query, args=None):
        return self.action(query, args).fetchall()

    @staticmethod
    def genParams(myDict):
        return [x + " = ?" for x in list(myDict.keys())]

