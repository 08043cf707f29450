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

import datetime
from dataclasses import dataclass, field
from typing import Optional

from locallibrary.formatter import displayDate
from locallibrary.models.base import Document
from locallibrary.models.book import Book

STATUSES = ['Available', 'Maintenance', 'Loaned', 'Reserved']


@dataclass
class BookInstance(Document):
    """A physical copy of a book"""
    id: Optional[str] = None
    book_id: str = ''
    imprint: str = ''
    status: str = 'Maintenance'
    due_back: Optional[datetime.date] = field(default_factory=datetime.date.today)

    book: Optional[Book] = field(default=None, compare=False, repr=False)

    table = 'bookinstances'
    key = 'InstanceID'
    url_prefix = '/catalog/bookinstance'
    columns = {
        'book_id': 'BookID',
        'imprint': 'Imprint',
        'status': 'Status',
        'due_back': 'DueBack',
    }
    date_fields = ('due_back',)

    @property
    def due_back_formatted(self) -> str:
        return displayDate(self.due_back)

    def populate(self, db=None) -> 'BookInstance':
        self.book = Book.find_by_id(self.book_id, db=db)
        return self
