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
Shared persistence for the catalog records.

Each record type is a dataclass that names its table, its key column and
the mapping from attribute to column. Document turns that into the small
set of store operations the handlers need: find, find_by_id, count, save,
find_by_id_and_replace and find_by_id_and_remove.

Every call accepts an optional DBConnection. Without one a fresh
connection is opened, which is what the parallel readers rely on since a
sqlite connection must stay on the thread that opened it.
"""

import datetime
import uuid
from typing import Any, ClassVar, Dict, Iterable, List, Optional, Sequence, Tuple

import locallibrary
from locallibrary import database, logger
from locallibrary.formatter import to_date

SORT_ORDER = {'ascending': 'ASC', 'asc': 'ASC', 'descending': 'DESC', 'desc': 'DESC'}


class Document(object):
    """Base class for the catalog dataclasses."""

    table: ClassVar[str] = ''
    key: ClassVar[str] = ''
    url_prefix: ClassVar[str] = ''
    # attribute -> column, in insert order
    columns: ClassVar[Dict[str, str]] = {}
    # attributes stored as yyyy-mm-dd text
    date_fields: ClassVar[Tuple[str, ...]] = ()

    id: Optional[str]

    @property
    def url(self) -> str:
        return '%s/%s' % (self.url_prefix, self.id)

    @classmethod
    def _db(cls, db):
        return db if db is not None else database.DBConnection()

    @classmethod
    def column(cls, attr: str) -> str:
        if attr == 'id':
            return cls.key
        try:
            return cls.columns[attr]
        except KeyError:
            raise ValueError('%s has no field %s' % (cls.__name__, attr))

    @classmethod
    def criterion(cls, attr: str, value: Any) -> Tuple[str, List[Any]]:
        """SQL fragment and args for one attribute test, a list or tuple value means any of"""
        if isinstance(value, (list, tuple)):
            if not value:
                return '0', []
            return '%s IN (%s)' % (cls.column(attr), ', '.join(['?'] * len(value))), \
                [cls.encode(attr, v) for v in value]
        return '%s=?' % cls.column(attr), [cls.encode(attr, value)]

    @classmethod
    def where(cls, criteria: Optional[Dict[str, Any]]) -> Tuple[str, List[Any]]:
        if not criteria:
            return '', []
        clauses = []
        args = []
        for attr, value in criteria.items():
            clause, clause_args = cls.criterion(attr, value)
            clauses.append(clause)
            args.extend(clause_args)
        return ' WHERE ' + ' AND '.join(clauses), args

    @classmethod
    def encode(cls, attr: str, value: Any) -> Any:
        if attr in cls.date_fields:
            if isinstance(value, (datetime.date, datetime.datetime)):
                return to_date(value).isoformat()
            return value or None
        return value

    @classmethod
    def from_row(cls, row) -> 'Document':
        keys = row.keys()
        values = {'id': row[cls.key]}
        for attr, column in cls.columns.items():
            if column in keys:
                value = row[column]
                if attr in cls.date_fields:
                    value = to_date(value)
                values[attr] = value
        return cls(**values)

    def stored_values(self) -> Dict[str, Any]:
        return dict((column, self.encode(attr, getattr(self, attr)))
                    for attr, column in self.columns.items())

    @classmethod
    def find(cls, criteria: Optional[Dict[str, Any]] = None,
             sort: Optional[Sequence[Tuple[str, str]]] = None,
             fields: Optional[Iterable[str]] = None, db=None) -> List['Document']:
        """
        All records matching criteria, an empty list when nothing matches
        sort is a list of (attribute, 'ascending'|'descending')
        fields limits the columns loaded, the id is always loaded
        """
        myDB = cls._db(db)
        if fields:
            select = ', '.join([cls.key] + [cls.column(f) for f in fields if cls.column(f) != cls.key])
        else:
            select = '*'
        query = 'SELECT %s FROM %s' % (select, cls.table)
        clause, args = cls.where(criteria)
        query += clause
        if sort:
            order = []
            for attr, direction in sort:
                if direction not in SORT_ORDER:
                    raise ValueError('Unknown sort direction %s' % direction)
                order.append('%s %s' % (cls.column(attr), SORT_ORDER[direction]))
            query += ' ORDER BY ' + ', '.join(order)
        records = [cls.from_row(row) for row in myDB.fetch_all(query, args)]
        cls.after_load(records, myDB)
        return records

    @classmethod
    def after_load(cls, records: List['Document'], db) -> None:
        """Hook for loading data kept outside the main table"""
        pass

    @classmethod
    def find_by_id(cls, record_id: Optional[str], db=None) -> Optional['Document']:
        if not record_id:
            return None
        records = cls.find({'id': record_id}, db=db)
        if records:
            return records[0]
        return None

    @classmethod
    def count(cls, criteria: Optional[Dict[str, Any]] = None, db=None) -> int:
        myDB = cls._db(db)
        clause, args = cls.where(criteria)
        row = myDB.fetch_one('SELECT COUNT(*) FROM %s%s' % (cls.table, clause), args)
        return row[0]

    def save(self, db=None) -> 'Document':
        """Insert the record, assigning a new id if it has none"""
        myDB = self._db(db)
        if not self.id:
            self.id = uuid.uuid4().hex
        values = self.stored_values()
        columns = [self.key] + list(values.keys())
        myDB.action('INSERT INTO %s (%s) VALUES (%s)' % (
            self.table, ', '.join(columns), ', '.join(['?'] * len(columns))),
            [self.id] + list(values.values()))
        self.save_related(myDB)
        if locallibrary.LOGLEVEL & locallibrary.log_dbcomms:
            logger.debug('Saved %s %s' % (self.__class__.__name__, self.id))
        return self

    def save_related(self, db) -> None:
        """Hook for writing data kept outside the main table"""
        pass

    @classmethod
    def find_by_id_and_replace(cls, record_id: str, record: 'Document', db=None) -> Optional['Document']:
        """
        Overwrite every stored field of record_id with those of record
        Returns record carrying record_id, or None if there was nothing to replace
        """
        myDB = cls._db(db)
        values = record.stored_values()
        result = myDB.action('UPDATE %s SET %s WHERE %s=?' % (
            cls.table, ', '.join(myDB.genParams(values)), cls.key),
            list(values.values()) + [record_id])
        if not result or result.rowcount == 0:
            return None
        record.id = record_id
        record.save_related(myDB)
        return record

    @classmethod
    def find_by_id_and_remove(cls, record_id: str, db=None) -> Optional['Document']:
        myDB = cls._db(db)
        record = cls.find_by_id(record_id, db=myDB)
        if not record:
            return None
        myDB.action('DELETE FROM %s WHERE %s=?' % (cls.table, cls.key), (record_id,))
        return record
