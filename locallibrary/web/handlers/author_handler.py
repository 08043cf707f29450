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
Author web handlers for LocalLibrary.

List, detail, create, update and delete for authors. An author can only
be deleted once no book refers to it.
"""

from typing import Any, Dict, Optional

import cherrypy

from locallibrary import logger
from locallibrary.formatter import plural
from locallibrary.models import Author, Book
from locallibrary.parallel import run_parallel
from locallibrary.validation import Field, FormValidator
from locallibrary.web.templates import serve_template

AUTHOR_FORM = FormValidator(
    Field('first_name').trim()
    .not_empty('First name must be specified.')
    .length('First name must not exceed 100 characters.', max_len=100)
    .alphanumeric('First name has non-alphanumeric characters.')
    .escape(),
    Field('family_name').trim()
    .not_empty('Family name must be specified.')
    .length('Family name must not exceed 100 characters.', max_len=100)
    .alphanumeric('Family name has non-alphanumeric characters.')
    .escape(),
    Field('date_of_birth').optional().iso8601('Invalid date of birth').to_date(),
    Field('date_of_death').optional().iso8601('Invalid date of death').to_date(),
)


def _author_from_form(values: Dict[str, Any], author_id: Optional[str] = None) -> Author:
    return Author(
        id=author_id,
        first_name=values['first_name'],
        family_name=values['family_name'],
        date_of_birth=values['date_of_birth'],
        date_of_death=values['date_of_death'],
    )


class AuthorHandler:
    """Handler class for author web operations.

    Every method either returns rendered HTML or raises a CherryPy
    HTTPRedirect / HTTPError for the dispatcher to act on.
    """

    @staticmethod
    def author_list() -> str:
        authors = Author.find(sort=[('family_name', 'ascending')])
        return serve_template(templatename="author_list.html", title="Author List", author_list=authors)

    @staticmethod
    def author_detail(author_id: str) -> str:
        """Render one author with the titles and summaries of their books.

        Raises:
            cherrypy.HTTPError: 404 if there is no such author
        """
        results = run_parallel(
            author=lambda: Author.find_by_id(author_id),
            author_books=lambda: Book.find({'author_id': author_id}, fields=['title', 'summary']),
        )
        if results['author'] is None:
            logger.debug("Author %s not found" % author_id)
            raise cherrypy.HTTPError(404, 'Author not found')

        return serve_template(templatename="author_detail.html", title="Author Detail",
                              author=results['author'], author_books=results['author_books'])

    @staticmethod
    def author_create_get() -> str:
        return serve_template(templatename="author_form.html", title="Create Author")

    @staticmethod
    def author_create_post(**kwargs: Any) -> str:
        """Validate and save a new author, then redirect to it.

        On validation failure the form is shown again with the cleaned
        values and every error message, nothing is saved.
        """
        result = AUTHOR_FORM.validate(kwargs)
        author = _author_from_form(result.values)

        if result.errors:
            logger.debug("Author form rejected: %s" % ', '.join(result.messages()))
            return serve_template(templatename="author_form.html", title="Create Author",
                                  author=author, errors=result.errors)

        author.save()
        logger.info("Added author %s [%s]" % (author.name, author.id))
        raise cherrypy.HTTPRedirect(author.url, 303)

    @staticmethod
    def author_update_get(author_id: str) -> str:
        author = Author.find_by_id(author_id)
        if author is None:
            logger.debug("Author %s not found" % author_id)
            raise cherrypy.HTTPError(404, 'Author not found')
        return serve_template(templatename="author_form.html", title="Update Author", author=author)

    @staticmethod
    def author_update_post(author_id: str, **kwargs: Any) -> str:
        result = AUTHOR_FORM.validate(kwargs)
        # keep the id from the url, a new one must not be assigned
        author = _author_from_form(result.values, author_id)

        if result.errors:
            logger.debug("Author form rejected: %s" % ', '.join(result.messages()))
            return serve_template(templatename="author_form.html", title="Update Author",
                                  author=author, errors=result.errors)

        updated = Author.find_by_id_and_replace(author_id, author)
        if updated is None:
            logger.debug("Author %s not found" % author_id)
            raise cherrypy.HTTPError(404, 'Author not found')
        logger.info("Updated author %s [%s]" % (updated.name, author_id))
        raise cherrypy.HTTPRedirect(updated.url, 303)

    @staticmethod
    def _author_and_books(author_id: Optional[str]) -> Dict[str, Any]:
        return run_parallel(
            author=lambda: Author.find_by_id(author_id),
            author_books=lambda: Book.find({'author_id': author_id}) if author_id else [],
        )

    @staticmethod
    def author_delete_get(author_id: str) -> str:
        results = AuthorHandler._author_and_books(author_id)
        if results['author'] is None:
            raise cherrypy.HTTPRedirect('/catalog/authors')

        return serve_template(templatename="author_delete.html", title="Delete Author",
                              author=results['author'], author_books=results['author_books'])

    @staticmethod
    def author_delete_post(**kwargs: Any) -> str:
        """Delete the author named by the authorid form field.

        While books still refer to the author the confirmation page is
        shown again listing them.
        """
        author_id = kwargs.get('authorid')
        results = AuthorHandler._author_and_books(author_id)

        if results['author_books']:
            logger.info("Author %s still has %d book%s, not deleted" % (
                author_id, len(results['author_books']), plural(len(results['author_books']))))
            return serve_template(templatename="author_delete.html", title="Delete Author",
                                  author=results['author'], author_books=results['author_books'])

        removed = Author.find_by_id_and_remove(author_id)
        if removed:
            logger.info("Deleted author %s [%s]" % (removed.name, author_id))
        raise cherrypy.HTTPRedirect('/catalog/authors', 303)
