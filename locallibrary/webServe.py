#  This file is part of LocalLibrary.
#  LocalLibrary is free software':'you can redistribute it and/or modify
#  it under the terms of the GNU General Public License as published by
#  the Free Software Foundation, either version 3 of the License, or
#  (at your option) any later version.
#  LocalLibrary is distributed in the hope that it will be useful,
#  but WITHOUT ANY WARRANTY; without even the implied warranty of
#  MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#  GNU General Public License for more details.
#  You should have received a copy of the GNU General Public License
#  along with LocalLibrary.  If not, see <http://www.gnu.org/licenses/>.

import threading

import cherrypy
import locallibrary
from locallibrary import logger
from locallibrary.web.handlers import AuthorHandler, BookHandler, BookInstanceHandler, CatalogHandler, \
    GenreHandler
from locallibrary.web.templates import serve_template


def error_page(status, message, traceback, version):
    """ Shared page for 404s and 500s, installed as error_page.default """
    code = str(status).split(' ')[0]
    if code.startswith('5'):
        logger.error("%s: %s" % (status, message))
        if traceback:
            logger.debug(traceback)
    else:
        logger.debug("%s: %s %s" % (status, cherrypy.request.path_info, message))

    if locallibrary.LOGLEVEL < 2:
        traceback = ''
    return serve_template(templatename="error.html", title=status, status=status, message=message,
                          traceback=traceback)


def _allow(*methods):
    """ 405 unless the request method is one of methods, HEAD goes with GET """
    method = cherrypy.request.method
    if method == 'HEAD' and 'GET' in methods:
        return 'GET'
    if method not in methods:
        cherrypy.response.headers['Allow'] = ', '.join(methods)
        raise cherrypy.HTTPError(405)
    return method


def _dispatch(handler, entity, record_id, action, params):
    """
    Route /catalog/<entity>/create, /catalog/<entity>/<id>
    and /catalog/<entity>/<id>/<update|delete> onto handler methods
    named <entity>_create_get, <entity>_detail, <entity>_update_post etc
    """
    if not record_id:
        raise cherrypy.HTTPError(404)

    if record_id == 'create' and action is None:
        if _allow('GET', 'POST') == 'GET':
            return getattr(handler, '%s_create_get' % entity)()
        return getattr(handler, '%s_create_post' % entity)(**params)

    if action is None:
        _allow('GET')
        return getattr(handler, '%s_detail' % entity)(record_id)

    if action == 'update':
        if _allow('GET', 'POST') == 'GET':
            return getattr(handler, '%s_update_get' % entity)(record_id)
        return getattr(handler, '%s_update_post' % entity)(record_id, **params)

    if action == 'delete':
        if _allow('GET', 'POST') == 'GET':
            return getattr(handler, '%s_delete_get' % entity)(record_id)
        # the record to delete comes from the form, not the url
        return getattr(handler, '%s_delete_post' % entity)(**params)

    raise cherrypy.HTTPError(404)


class Catalog(object):
    """Everything under /catalog"""

    @staticmethod
    def label_thread(name=None):
        if name:
            threading.current_thread().name = name
        else:
            threadname = threading.current_thread().name
            if "Thread-" in threadname or "CP Server" in threadname:
                threading.current_thread().name = "WEBSERVER"

    @cherrypy.expose
    def index(self):
        _allow('GET')
        self.label_thread()
        return CatalogHandler.index()

    @cherrypy.expose
    def authors(self):
        _allow('GET')
        self.label_thread()
        return AuthorHandler.author_list()

    @cherrypy.expose
    def author(self, author_id=None, action=None, **kwargs):
        self.label_thread()
        return _dispatch(AuthorHandler, 'author', author_id, action, kwargs)

    @cherrypy.expose
    def books(self):
        _allow('GET')
        self.label_thread()
        return BookHandler.book_list()

    @cherrypy.expose
    def book(self, book_id=None, action=None, **kwargs):
        self.label_thread()
        return _dispatch(BookHandler, 'book', book_id, action, kwargs)

    @cherrypy.expose
    def genres(self):
        _allow('GET')
        self.label_thread()
        return GenreHandler.genre_list()

    @cherrypy.expose
    def genre(self, genre_id=None, action=None, **kwargs):
        self.label_thread()
        return _dispatch(GenreHandler, 'genre', genre_id, action, kwargs)

    @cherrypy.expose
    def bookinstances(self):
        _allow('GET')
        self.label_thread()
        return BookInstanceHandler.bookinstance_list()

    @cherrypy.expose
    def bookinstance(self, bookinstance_id=None, action=None, **kwargs):
        self.label_thread()
        return _dispatch(BookInstanceHandler, 'bookinstance', bookinstance_id, action, kwargs)


class WebInterface(object):

    catalog = Catalog()

    @cherrypy.expose
    def index(self):
        raise cherrypy.HTTPRedirect("/catalog")
