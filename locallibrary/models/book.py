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

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from locallibrary.models.author import Author
from locallibrary.models.base import Document
from locallibrary.models.genre import Genre

# sqlite has a limit on host parameters per statement
CHUNK_SIZE = 500


@dataclass
class Book(Document):
    id: Optional[str] = None
    title: str = ''
    author_id: str = ''
    summary: str = ''
    isbn: str = ''
    # kept in book_genres, in the order they were submitted
    genre_ids: List[str] = field(default_factory=list)

    # filled in by populate()
    author: Optional[Author] = field(default=None, compare=False, repr=False)
    genres: List[Genre] = field(default_factory=list, compare=False, repr=False)

    table = 'books'
    key = 'BookID'
    url_prefix = '/catalog/book'
    columns = {
        'title': 'Title',
        'author_id': 'AuthorID',
        'summary': 'Summary',
        'isbn': 'ISBN',
    }

    @classmethod
    def criterion(cls, attr: str, value: Any) -> Tuple[str, List[Any]]:
        if attr == 'genre_ids':
            return 'BookID IN (SELECT BookID FROM book_genres WHERE GenreID=?)', [value]
        return super().criterion(attr, value)

    @classmethod
    def after_load(cls, records: List['Book'], db) -> None:
        by_id = dict((book.id, book) for book in records)
        ids = list(by_id.keys())
        for start in range(0, len(ids), CHUNK_SIZE):
            chunk = ids[start:start + CHUNK_SIZE]
            rows = db.fetch_all('SELECT BookID, GenreID FROM book_genres WHERE BookID IN (%s) '
                                'ORDER BY Position' % ', '.join(['?'] * len(chunk)), chunk)
            for row in rows:
                by_id[row['BookID']].genre_ids.append(row['GenreID'])

    def save_related(self, db) -> None:
        db.action('DELETE FROM book_genres WHERE BookID=?', (self.id,))
        for position, genre_id in enumerate(self.genre_ids):
            db.action('INSERT INTO book_genres (BookID, GenreID, Position) VALUES (?, ?, ?)',
                      (self.id, genre_id, position), suppress='UNIQUE')

    def populate(self, db=None) -> 'Book':
        """Load the referenced author and genres as full records"""
        myDB = self._db(db)
        self.author = Author.find_by_id(self.author_id, db=myDB)
        if self.genre_ids:
            found = dict((genre.id, genre) for genre in Genre.find({'id': self.genre_ids}, db=myDB))
            self.genres = [found[genre_id] for genre_id in self.genre_ids if genre_id in found]
        else:
            self.genres = []
        return self
