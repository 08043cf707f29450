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
Genre web handlers for LocalLibrary.
"""

from typing import Any, Dict, Optional

import cherrypy

from locallibrary import logger
from locallibrary.formatter import plural
from locallibrary.models import Book, Genre
from locallibrary.parallel import run_parallel
from locallibrary.validation import Field, FormValidator
from locallibrary.web.templates import serve_template

GENRE_FORM = FormValidator(
    Field('name').trim()
    .length('Genre name must contain at least 3 characters.', min_len=3, max_len=100)
    .escape(),
)


class GenreHandler:
    """Handler class for genre web operations."""

    @staticmethod
    def genre_list() -> str:
        genres = Genre.find(sort=[('name', 'ascending')])
        return serve_template(templatename="genre_list.html", title="Genre List", genre_list=genres)

    @staticmethod
    def _genre_and_books(genre_id: Optional[str]) -> Dict[str, Any]:
        return run_parallel(
            genre=lambda: Genre.find_by_id(genre_id),
            genre_books=lambda: Book.find({'genre_ids': genre_id}, sort=[('title', 'ascending')]) if genre_id else [],
        )

    @staticmethod
    def genre_detail(genre_id: str) -> str:
        results = GenreHandler._genre_and_books(genre_id)
        if results['genre'] is None:
            logger.debug("Genre %s not found" % genre_id)
            raise cherrypy.HTTPError(404, 'Genre not found')

        return serve_template(templatename="genre_detail.html", title="Genre Detail",
                              genre=results['genre'], genre_books=results['genre_books'])

    @staticmethod
    def genre_create_get() -> str:
        return serve_template(templatename="genre_form.html", title="Create Genre")

    @staticmethod
    def genre_create_post(**kwargs: Any) -> str:
        """Save a new genre, or go to the existing one if the name is taken"""
        result = GENRE_FORM.validate(kwargs)
        genre = Genre(name=result.values['name'])

        if result.errors:
            logger.debug("Genre form rejected: %s" % ', '.join(result.messages()))
            return serve_template(templatename="genre_form.html", title="Create Genre",
                                  genre=genre, errors=result.errors)

        existing = Genre.find({'name': genre.name})
        if existing:
            logger.debug("Genre %s already exists [%s]" % (genre.name, existing[0].id))
            raise cherrypy.HTTPRedirect(existing[0].url, 303)

        genre.save()
        logger.info("Added genre %s [%s]" % (genre.name, genre.id))
        raise cherrypy.HTTPRedirect(genre.url, 303)

    @staticmethod
    def genre_update_get(genre_id: str) -> str:
        genre = Genre.find_by_id(genre_id)
        if genre is None:
            logger.debug("Genre %s not found" % genre_id)
            raise cherrypy.HTTPError(404, 'Genre not found')
        return serve_template(templatename="genre_form.html", title="Update Genre", genre=genre)

    @staticmethod
    def genre_update_post(genre_id: str, **kwargs: Any) -> str:
        result = GENRE_FORM.validate(kwargs)
        genre = Genre(id=genre_id, name=result.values['name'])

        if result.errors:
            logger.debug("Genre form rejected: %s" % ', '.join(result.messages()))
            return serve_template(templatename="genre_form.html", title="Update Genre",
                                  genre=genre, errors=result.errors)

        updated = Genre.find_by_id_and_replace(genre_id, genre)
        if updated is None:
            logger.debug("Genre %s not found" % genre_id)
            raise cherrypy.HTTPError(404, 'Genre not found')
        logger.info("Updated genre %s [%s]" % (updated.name, genre_id))
        raise cherrypy.HTTPRedirect(updated.url, 303)

    @staticmethod
    def genre_delete_get(genre_id: str) -> str:
        results = GenreHandler._genre_and_books(genre_id)
        if results['genre'] is None:
            raise cherrypy.HTTPRedirect('/catalog/genres')

        return serve_template(templatename="genre_delete.html", title="Delete Genre",
                              genre=results['genre'], genre_books=results['genre_books'])

    @staticmethod
    def genre_delete_post(**kwargs: Any) -> str:
        genre_id = kwargs.get('genreid')
        results = GenreHandler._genre_and_books(genre_id)

        if results['genre_books']:
            logger.info("Genre %s is used by %d book%s, not deleted" % (
                genre_id, len(results['genre_books']), plural(len(results['genre_books']))))
            return serve_template(templatename="genre_delete.html", title="Delete Genre",
                                  genre=results['genre'], genre_books=results['genre_books'])

        removed = Genre.find_by_id_and_remove(genre_id)
        if removed:
            logger.info("Deleted genre %s [%s]" % (removed.name, genre_id))
        raise cherrypy.HTTPRedirect('/catalog/genres', 303)
