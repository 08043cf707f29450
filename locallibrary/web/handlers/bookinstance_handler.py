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
Book instance web handlers for LocalLibrary.

A book instance is one physical copy of a book with its own imprint,
loan status and due date. Nothing depends on a copy, so it can always
be deleted.
"""

import datetime
from typing import Any, Dict, List, Optional

import cherrypy

from locallibrary import logger
from locallibrary.models import Book, BookInstance, STATUSES
from locallibrary.parallel import run_parallel
from locallibrary.validation import Field, FormValidator
from locallibrary.web.templates import serve_template

BOOKINSTANCE_FORM = FormValidator(
    Field('book').trim().not_empty('Book must be specified').exists(Book, 'Book not found.').escape(),
    Field('imprint').trim().not_empty('Imprint must be specified').escape(),
    Field('status').trim().escape().is_in(STATUSES, 'Invalid status'),
    Field('due_back').optional().iso8601('Invalid date').to_date(),
)


def _instance_from_form(values: Dict[str, Any], instance_id: Optional[str] = None) -> BookInstance:
    return BookInstance(
        id=instance_id,
        book_id=values['book'],
        imprint=values['imprint'],
        status=values['status'],
        due_back=values['due_back'] or datetime.date.today(),
    )


def _book_choices() -> List[Book]:
    return Book.find(sort=[('title', 'ascending')], fields=['title'])


def _populated_instance(instance_id: str) -> Optional[BookInstance]:
    bookinstance = BookInstance.find_by_id(instance_id)
    if bookinstance:
        bookinstance.populate()
    return bookinstance


def _instance_list() -> List[BookInstance]:
    bookinstances = BookInstance.find(sort=[('status', 'ascending'), ('due_back', 'ascending')])
    for bookinstance in bookinstances:
        bookinstance.populate()
    return bookinstances


class BookInstanceHandler:
    """Handler class for book instance web operations."""

    @staticmethod
    def bookinstance_list() -> str:
        return serve_template(templatename="bookinstance_list.html", title="Book Instance List",
                              bookinstance_list=_instance_list())

    @staticmethod
    def bookinstance_detail(instance_id: str) -> str:
        bookinstance = _populated_instance(instance_id)
        if bookinstance is None:
            logger.debug("Book copy %s not found" % instance_id)
            raise cherrypy.HTTPError(404, 'Book copy not found')

        title = 'Copy: %s' % bookinstance.book.title if bookinstance.book else 'Copy'
        return serve_template(templatename="bookinstance_detail.html", title=title, bookinstance=bookinstance)

    @staticmethod
    def bookinstance_create_get() -> str:
        return serve_template(templatename="bookinstance_form.html", title="Create BookInstance",
                              books=_book_choices(), statuses=STATUSES)

    @staticmethod
    def bookinstance_create_post(**kwargs: Any) -> str:
        result = BOOKINSTANCE_FORM.validate(kwargs)
        bookinstance = _instance_from_form(result.values)

        if result.errors:
            logger.debug("Book instance form rejected: %s" % ', '.join(result.messages()))
            return serve_template(templatename="bookinstance_form.html", title="Create BookInstance",
                                  books=_book_choices(), statuses=STATUSES,
                                  bookinstance=bookinstance, errors=result.errors)

        bookinstance.save()
        logger.info("Added copy %s of book %s" % (bookinstance.id, bookinstance.book_id))
        raise cherrypy.HTTPRedirect(bookinstance.url, 303)

    @staticmethod
    def bookinstance_update_get(instance_id: str) -> str:
        results = run_parallel(
            bookinstance=lambda: BookInstance.find_by_id(instance_id),
            books=_book_choices,
        )
        if results['bookinstance'] is None:
            logger.debug("Book copy %s not found" % instance_id)
            raise cherrypy.HTTPError(404, 'Book copy not found')

        return serve_template(templatename="bookinstance_form.html", title="Update BookInstance",
                              books=results['books'], statuses=STATUSES,
                              bookinstance=results['bookinstance'])

    @staticmethod
    def bookinstance_update_post(instance_id: str, **kwargs: Any) -> str:
        result = BOOKINSTANCE_FORM.validate(kwargs)
        bookinstance = _instance_from_form(result.values, instance_id)

        if result.errors:
            logger.debug("Book instance form rejected: %s" % ', '.join(result.messages()))
            return serve_template(templatename="bookinstance_form.html", title="Update BookInstance",
                                  books=_book_choices(), statuses=STATUSES,
                                  bookinstance=bookinstance, errors=result.errors)

        updated = BookInstance.find_by_id_and_replace(instance_id, bookinstance)
        if updated is None:
            logger.debug("Book copy %s not found" % instance_id)
            raise cherrypy.HTTPError(404, 'Book copy not found')
        logger.info("Updated copy %s of book %s" % (instance_id, updated.book_id))
        raise cherrypy.HTTPRedirect(updated.url, 303)

    @staticmethod
    def bookinstance_delete_get(instance_id: str) -> str:
        bookinstance = _populated_instance(instance_id)
        if bookinstance is None:
            raise cherrypy.HTTPRedirect('/catalog/bookinstances')

        return serve_template(templatename="bookinstance_delete.html", title="Delete BookInstance",
                              bookinstance=bookinstance)

    @staticmethod
    def bookinstance_delete_post(**kwargs: Any) -> str:
        instance_id = kwargs.get('bookinstanceid')
        removed = BookInstance.find_by_id_and_remove(instance_id)
        if removed:
            logger.info("Deleted copy %s of book %s" % (instance_id, removed.book_id))
        raise cherrypy.HTTPRedirect('/catalog/bookinstances', 303)
