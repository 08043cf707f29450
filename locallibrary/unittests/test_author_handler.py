#  This file is part of LocalLibrary.
#
#  LocalLibrary is free software: you can redistribute it and/or modify
#  it under the terms of the GNU General Public License as published by
#  the Free Software Foundation, either version 3 of the License, or
#  (at your option) any later version.
#
#  LocalLibrary is distributed in the hope that it will be useful,
#  but WITHOUT ANY WARRANTY; without even the implied warranty of
#  MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#  GNU General Public License for more details.
#
#  You should have received a copy of the GNU General Public License
#  along with LocalLibrary.  If not, see <http://www.gnu.org/licenses/>.

"""
Unit tests for locallibrary.web.handlers.author_handler.

Tests cover:
- author list and detail
- create and update with validation failures
- delete refused while books remain
"""

import datetime
import sqlite3
from unittest.mock import patch

import cherrypy
import pytest

from locallibrary.database import DBConnection
from locallibrary.models import Author, Book
from locallibrary.web.handlers.author_handler import AuthorHandler


def rendered(mock_serve):
    """Template name and data bag of the last render."""
    kwargs = mock_serve.call_args[1]
    return kwargs['templatename'], kwargs


class TestAuthorList:
    """Tests for author_list."""

    def test_sorted_by_family_name(self, sample_catalog, capture_template):
        AuthorHandler.author_list()
        template, data = rendered(capture_template)
        assert template == 'author_list.html'
        assert data['title'] == 'Author List'
        assert [a.family_name for a in data['author_list']] == ['Austen', 'Tolkien']

    def test_empty(self, temp_db, capture_template):
        AuthorHandler.author_list()
        assert rendered(capture_template)[1]['author_list'] == []

    def test_database_error_propagates(self, temp_db, capture_template):
        with patch.object(DBConnection, 'fetch_all', side_effect=sqlite3.OperationalError('disk I/O error')):
            with pytest.raises(sqlite3.OperationalError):
                AuthorHandler.author_list()
        capture_template.assert_not_called()


class TestAuthorDetail:
    """Tests for author_detail."""

    def test_author_with_books(self, sample_catalog, capture_template):
        AuthorHandler.author_detail(sample_catalog['tolkien'].id)
        template, data = rendered(capture_template)
        assert template == 'author_detail.html'
        assert data['title'] == 'Author Detail'
        assert data['author'].name == 'Tolkien, John'
        assert [(b.title, b.summary) for b in data['author_books']] == [('The Hobbit', 'There and back again.')]

    def test_missing_author_is_404(self, temp_db, capture_template):
        with pytest.raises(cherrypy.HTTPError) as excinfo:
            AuthorHandler.author_detail('nothere')
        assert excinfo.value.code == 404
        assert excinfo.value._message == 'Author not found'
        capture_template.assert_not_called()

    def test_database_error_propagates(self, sample_catalog, capture_template):
        """A failing read is left for the 500 error page, not rendered."""
        with patch.object(DBConnection, 'fetch_all', side_effect=sqlite3.OperationalError('disk I/O error')):
            with pytest.raises(sqlite3.OperationalError):
                AuthorHandler.author_detail(sample_catalog['tolkien'].id)
        capture_template.assert_not_called()


class TestAuthorCreate:
    """Tests for author_create_get and author_create_post."""

    def test_create_form(self, temp_db, capture_template):
        AuthorHandler.author_create_get()
        template, data = rendered(capture_template)
        assert template == 'author_form.html'
        assert data['title'] == 'Create Author'

    def test_valid_author_saved_and_redirected(self, temp_db, capture_template):
        with pytest.raises(cherrypy.HTTPRedirect) as excinfo:
            AuthorHandler.author_create_post(first_name=' Jane ', family_name='Austen',
                                             date_of_birth='1775-12-16', date_of_death='')
        assert excinfo.value.status == 303
        authors = Author.find()
        assert len(authors) == 1
        assert authors[0].first_name == 'Jane'
        assert authors[0].date_of_birth == datetime.date(1775, 12, 16)
        assert authors[0].date_of_death is None
        assert excinfo.value.urls[0].endswith('/catalog/author/%s' % authors[0].id)

    def test_invalid_author_rerenders_form(self, temp_db, capture_template):
        AuthorHandler.author_create_post(first_name='', family_name='O\'Brien', date_of_birth='someday')
        template, data = rendered(capture_template)
        assert template == 'author_form.html'
        messages = [e.msg for e in data['errors']]
        assert 'First name must be specified.' in messages
        assert 'Family name has non-alphanumeric characters.' in messages
        assert 'Invalid date of birth' in messages
        assert data['author'].family_name == 'O&#x27;Brien'
        assert Author.count() == 0

    def test_long_name_rejected(self, temp_db, capture_template):
        AuthorHandler.author_create_post(first_name='a' * 101, family_name='Smith')
        messages = [e.msg for e in rendered(capture_template)[1]['errors']]
        assert messages == ['First name must not exceed 100 characters.']


class TestAuthorUpdate:
    """Tests for author_update_get and author_update_post."""

    def test_update_form_prefilled(self, sample_catalog, capture_template):
        AuthorHandler.author_update_get(sample_catalog['austen'].id)
        template, data = rendered(capture_template)
        assert template == 'author_form.html'
        assert data['title'] == 'Update Author'
        assert data['author'].id == sample_catalog['austen'].id

    def test_update_form_missing_author(self, temp_db, capture_template):
        with pytest.raises(cherrypy.HTTPError) as excinfo:
            AuthorHandler.author_update_get('nothere')
        assert excinfo.value.code == 404

    def test_update_keeps_id(self, sample_catalog, capture_template):
        author_id = sample_catalog['austen'].id
        with pytest.raises(cherrypy.HTTPRedirect) as excinfo:
            AuthorHandler.author_update_post(author_id, first_name='Jane', family_name='Austen',
                                             date_of_birth='1775-12-16', date_of_death='1817-07-18')
        assert excinfo.value.urls[0].endswith('/catalog/author/%s' % author_id)
        assert Author.count() == 2
        assert Author.find_by_id(author_id).date_of_death == datetime.date(1817, 7, 18)

    def test_invalid_update_changes_nothing(self, sample_catalog, capture_template):
        author_id = sample_catalog['austen'].id
        AuthorHandler.author_update_post(author_id, first_name='', family_name='Austen')
        data = rendered(capture_template)[1]
        assert data['title'] == 'Update Author'
        assert data['author'].id == author_id
        assert Author.find_by_id(author_id).first_name == 'Jane'

    def test_update_missing_author_is_404(self, temp_db, capture_template):
        with pytest.raises(cherrypy.HTTPError) as excinfo:
            AuthorHandler.author_update_post('nothere', first_name='Jane', family_name='Austen')
        assert excinfo.value.code == 404
        assert Author.count() == 0


class TestAuthorDelete:
    """Tests for author_delete_get and author_delete_post."""

    def test_delete_page_lists_books(self, sample_catalog, capture_template):
        AuthorHandler.author_delete_get(sample_catalog['tolkien'].id)
        template, data = rendered(capture_template)
        assert template == 'author_delete.html'
        assert data['title'] == 'Delete Author'
        assert [b.title for b in data['author_books']] == ['The Hobbit']

    def test_delete_page_for_missing_author_redirects(self, temp_db, capture_template):
        with pytest.raises(cherrypy.HTTPRedirect) as excinfo:
            AuthorHandler.author_delete_get('nothere')
        assert excinfo.value.urls[0].endswith('/catalog/authors')

    def test_delete_refused_while_books_remain(self, sample_catalog, capture_template):
        author_id = sample_catalog['tolkien'].id
        AuthorHandler.author_delete_post(authorid=author_id)
        assert rendered(capture_template)[0] == 'author_delete.html'
        assert Author.find_by_id(author_id) is not None

    def test_delete_author_without_books(self, sample_catalog, capture_template):
        author = Author(first_name='Nobody', family_name='Unpublished').save()
        with pytest.raises(cherrypy.HTTPRedirect) as excinfo:
            AuthorHandler.author_delete_post(authorid=author.id)
        assert excinfo.value.status == 303
        assert excinfo.value.urls[0].endswith('/catalog/authors')
        assert Author.find_by_id(author.id) is None
        assert Book.count() == 2

    def test_delete_uses_form_id(self, sample_catalog, capture_template):
        """The record removed is the one named in the form body."""
        author = Author(first_name='Nobody', family_name='Unpublished').save()
        with pytest.raises(cherrypy.HTTPRedirect):
            AuthorHandler.author_delete_post(authorid=author.id)
        assert Author.count() == 2
