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

import sqlite3

from locallibrary import logger
from locallibrary.models import Author, Book, BookInstance, Genre
from locallibrary.parallel import run_parallel
from locallibrary.web.templates import serve_template


class CatalogHandler:
    """The catalog home page with record counts."""

    @staticmethod
    def index() -> str:
        """Render the home page.

        Counts are taken in parallel. A database failure is shown on the
        page rather than turned into an error response.
        """
        error = None
        data = {}
        try:
            data = run_parallel(
                book_count=Book.count,
                book_instance_count=BookInstance.count,
                book_instance_available_count=lambda: BookInstance.count({'status': 'Available'}),
                author_count=Author.count,
                genre_count=Genre.count,
            )
        except sqlite3.Error as e:
            logger.error("Unable to count catalog records: %s %s" % (type(e).__name__, str(e)))
            error = str(e)

        return serve_template(templatename="index.html", title="Local Library Home", error=error, data=data)
