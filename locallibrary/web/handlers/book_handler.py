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
Book web handlers for LocalLibrary.

A book refers to one author and any number of genres, so the create and
update forms need the full author and genre lists. A book can only be
deleted once it has no copies left.
"""

from typing import Any, Dict, List, Optional

import cherrypy

from locallibrary import logger
from locallibrary.formatter import plural
from locallibrary.models import Author, Book, BookInstance, Genre
from locallibrary.parallel import run_parallel
from locallibrary.validation import Field, FormValidator
from locallibrary.web.templates import serve_template

BOOK_FORM = FormValidator(
    Field('title').trim().not_empty('Title must not be empty.').escape(),
    Field('author').trim().not_empty('Author must not be empty.').exists(Author, 'Author not found.').escape(),
    Field('summary').trim().not_empty('Summary must not be empty.').escape(),
    Field('isbn').trim().not_empty('ISBN must not be empty').escape(),
    Field('genre', many=True).trim().exists(Genre, 'Genre not found.').escape(),
)


def _book_from_form(values: Dict[str, Any], book_id: Optional[str] = None) -> Book:
    return Book(
        id=book_id,
        title=values['title'],
        author_id=values['author'],
        summary=values['summary'],
        isbn=values['isbn'],
        genre_ids=values['genre'],
    )


def _populated_book(book_id: str) -> Optional[Book]:
    book = Book.find_by_id(book_id)
    if book:
        book.populate()
    return book


def _book_list() -> List[Book]:
    books = Book.find(sort=[('title', 'ascending')], fields=['title', 'author_id'])
    for book in books:
        book.populate()
    return books


def _form_choices() -> Dict[str, Any]:
    return run_parallel(
        authors=lambda: Author.find(sort=[('family_name', 'ascending')]),
        genres=lambda: Genre.find(sort=[('name', 'ascending')]),
    )


class BookHandler:
    """Handler class for book web operations."""

    @staticmethod
    def book_list() -> str:
        return serve_template(templatename="book_list.html", title="Book List", book_list=_book_list())

    @staticmethod
    def book_detail(book_id: str) -> str:
        """Render a book with its author, genres and copies.

        Raises:
            cherrypy.HTTPError: 404 if there is no such book
        """
        results = run_parallel(
            book=lambda: _populated_book(book_id),
            book_instances=lambda: BookInstance.find({'book_id': book_id}),
        )
        book = results['book']
        if book is None:
            logger.debug("Book %s not found" % book_id)
            raise cherrypy.HTTPError(404, 'Book not found')

        return serve_template(templatename="book_detail.html", title=book.title, book=book,
                              book_instances=results['book_instances'])

    @staticmethod
    def book_create_get() -> str:
        choices = _form_choices()
        return serve_template(templatename="book_form.html", title="Create Book",
                              authors=choices['authors'], genres=choices['genres'])

    @staticmethod
    def book_create_post(**kwargs: Any) -> str:
        result = BOOK_FORM.validate(kwargs)
        book = _book_from_form(result.values)

        if result.errors:
            logger.debug("Book form rejected: %s" % ', '.join(result.messages()))
            choices = _form_choices()
            return serve_template(templatename="book_form.html", title="Create Book",
                                  authors=choices['authors'], genres=choices['genres'],
                                  book=book, errors=result.errors)

        book.save()
        logger.info("Added book %s [%s]" % (book.title, book.id))
        raise cherrypy.HTTPRedirect(book.url, 303)

    @staticmethod
    def book_update_get(book_id: str) -> str:
        results = run_parallel(
            book=lambda: _populated_book(book_id),
            authors=lambda: Author.find(sort=[('family_name', 'ascending')]),
            genres=lambda: Genre.find(sort=[('name', 'ascending')]),
        )
        if results['book'] is None:
            logger.debug("Book %s not found" % book_id)
            raise cherrypy.HTTPError(404, 'Book not found')

        return serve_template(templatename="book_form.html", title="Update Book",
                              authors=results['authors'], genres=results['genres'], book=results['book'])

    @staticmethod
    def book_update_post(book_id: str, **kwargs: Any) -> str:
        result = BOOK_FORM.validate(kwargs)
        book = _book_from_form(result.values, book_id)

        if result.errors:
            logger.debug("Book form rejected: %s" % ', '.join(result.messages()))
            choices = _form_choices()
            return serve_template(templatename="book_form.html", title="Update Book",
                                  authors=choices['authors'], genres=choices['genres'],
                                  book=book, errors=result.errors)

        updated = Book.find_by_id_and_replace(book_id, book)
        if updated is None:
            logger.debug("Book %s not found" % book_id)
            raise cherrypy.HTTPError(404, 'Book not found')
        logger.info("Updated book %s [%s]" % (updated.title, book_id))
        raise cherrypy.HTTPRedirect(updated.url, 303)

    @staticmethod
    def _book_and_copies(book_id: Optional[str]) -> Dict[str, Any]:
        return run_parallel(
            book=lambda: Book.find_by_id(book_id),
            bookinstances=lambda: BookInstance.find({'book_id': book_id}) if book_id else [],
        )

    @staticmethod
    def book_delete_get(book_id: str) -> str:
        results = BookHandler._book_and_copies(book_id)
        if results['book'] is None:
            raise cherrypy.HTTPRedirect('/catalog/books')

        return serve_template(templatename="book_delete.html", title="Delete Book",
                              book=results['book'], bookinstances=results['bookinstances'])

    @staticmethod
    def book_delete_post(**kwargs: Any) -> str:
        book_id = kwargs.get('bookid')
        results = BookHandler._book_and_copies(book_id)

        if results['bookinstances']:
            logger.info("Book %s still has %d instance%s, not deleted" % (
                book_id, len(results['bookinstances']), plural(len(results['bookinstances']))))
            return serve_template(templatename="book_delete.html", title="Delete Book",
                                  book=results['book'], bookinstances=results['bookinstances'])

        removed = Book.find_by_id_and_remove(book_id)
        if removed:
            logger.info("Deleted book %s [%s]" % (removed.title, book_id))
        raise cherrypy.HTTPRedirect('/catalog/books', 303)
