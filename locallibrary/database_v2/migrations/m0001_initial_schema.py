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

from locallibrary.database_v2.migration_framework import Migration, migration


@migration(1, "Create catalog tables")
class InitialSchema(Migration):
    """authors, books, genres, book_genres and bookinstances.

    Only book_genres carries a foreign key; the other references are
    checked by the delete handlers before anything is removed.
    """

    def up(self) -> None:
        if not self.has_table('authors'):
            self.db.action('CREATE TABLE authors (AuthorID TEXT UNIQUE PRIMARY KEY, '
                           'FirstName TEXT NOT NULL, FamilyName TEXT NOT NULL, '
                           'DateOfBirth TEXT, DateOfDeath TEXT)')
            self.log("Created table authors")

        if not self.has_table('genres'):
            self.db.action('CREATE TABLE genres (GenreID TEXT UNIQUE PRIMARY KEY, Name TEXT NOT NULL)')
            self.log("Created table genres")

        if not self.has_table('books'):
            self.db.action('CREATE TABLE books (BookID TEXT UNIQUE PRIMARY KEY, AuthorID TEXT NOT NULL, '
                           'Title TEXT NOT NULL, Summary TEXT NOT NULL, ISBN TEXT NOT NULL)')
            self.log("Created table books")

        if not self.has_table('book_genres'):
            self.db.action('CREATE TABLE book_genres (BookID TEXT NOT NULL, GenreID TEXT NOT NULL, '
                           'Position INTEGER DEFAULT 0, UNIQUE (BookID, GenreID), '
                           'FOREIGN KEY(BookID) REFERENCES books (BookID) ON DELETE CASCADE)')
            self.log("Created table book_genres")

        if not self.has_table('bookinstances'):
            self.db.action("CREATE TABLE bookinstances (InstanceID TEXT UNIQUE PRIMARY KEY, "
                           "BookID TEXT NOT NULL, Imprint TEXT NOT NULL, "
                           "Status TEXT NOT NULL DEFAULT 'Maintenance', DueBack TEXT)")
            self.log("Created table bookinstances")

        self.create_index('books', ['AuthorID'])
        self.create_index('book_genres', ['GenreID'])
        self.create_index('bookinstances', ['BookID'])
