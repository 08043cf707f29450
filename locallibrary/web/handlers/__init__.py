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
Web handlers for LocalLibrary.

Each handler class groups the operations for one part of the catalog and
is called from the exposed objects in webServe.
"""

from locallibrary.web.handlers.author_handler import AuthorHandler
from locallibrary.web.handlers.book_handler import BookHandler
from locallibrary.web.handlers.bookinstance_handler import BookInstanceHandler
from locallibrary.web.handlers.catalog_handler import CatalogHandler
from locallibrary.web.handlers.genre_handler import GenreHandler

__all__ = [
    'AuthorHandler',
    'BookHandler',
    'BookInstanceHandler',
    'CatalogHandler',
    'GenreHandler',
]
