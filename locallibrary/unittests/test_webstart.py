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

"""Unit tests for locallibrary.webStart server configuration."""

import os
import tempfile
from unittest.mock import patch

import pytest

import locallibrary
from locallibrary import webStart
from locallibrary.webServe import error_page


def options(**overrides):
    opts = {
        'http_port': 3000,
        'http_host': '127.0.0.1',
        'http_threads': 10,
        'http_proxy': False,
        'http_user': '',
        'http_pass': '',
        'https_enabled': False,
        'https_cert': '',
        'https_key': '',
    }
    opts.update(overrides)
    return opts


@pytest.fixture
def server_config():
    original_config = dict(locallibrary.CONFIG)
    original_cherrypylog = locallibrary.CHERRYPYLOG
    yield locallibrary.CONFIG
    locallibrary.CONFIG.clear()
    locallibrary.CONFIG.update(original_config)
    locallibrary.CHERRYPYLOG = original_cherrypylog


class TestBuildConfig:
    """Tests for build_config()."""

    def test_plain_http(self, server_config):
        options_dict, conf, protocol = webStart.build_config(options())
        assert protocol == 'http'
        assert options_dict['server.socket_port'] == 3000
        assert options_dict['server.socket_host'] == '127.0.0.1'
        assert options_dict['server.thread_pool'] == 10
        assert options_dict['error_page.default'] is error_page
        assert 'server.ssl_certificate' not in options_dict
        assert 'tools.auth_basic.on' not in conf['/']

    def test_static_css(self, server_config):
        options_dict, conf, protocol = webStart.build_config(options())
        assert conf['/css']['tools.staticdir.on'] is True
        assert conf['/css']['tools.staticdir.dir'] == os.path.join(locallibrary.PROG_DIR, 'data', 'css')

    def test_https_disabled_without_files(self, server_config):
        options_dict, conf, protocol = webStart.build_config(
            options(https_enabled=True, https_cert='/no/cert.pem', https_key='/no/key.pem'))
        assert protocol == 'http'
        assert 'server.ssl_certificate' not in options_dict

    def test_https_enabled(self, server_config):
        with tempfile.NamedTemporaryFile() as cert, tempfile.NamedTemporaryFile() as key:
            options_dict, conf, protocol = webStart.build_config(
                options(https_enabled=True, https_cert=cert.name, https_key=key.name))
        assert protocol == 'https'
        assert options_dict['server.ssl_certificate'] == cert.name
        assert options_dict['server.ssl_private_key'] == key.name

    def test_basic_auth_when_password_set(self, server_config):
        options_dict, conf, protocol = webStart.build_config(options(http_user='admin', http_pass='secret'))
        assert conf['/']['tools.auth_basic.on'] is True
        assert conf['/']['tools.auth_basic.realm'] == 'LocalLibrary'
        check = conf['/']['tools.auth_basic.checkpassword']
        assert check('LocalLibrary', 'admin', 'secret')
        assert not check('LocalLibrary', 'admin', 'wrong')

    def test_proxy_settings(self, server_config):
        server_config['PROXY_LOCAL'] = 'X-Forwarded-Host'
        options_dict, conf, protocol = webStart.build_config(options(http_proxy=True))
        assert conf['/']['tools.proxy.on'] is True
        assert conf['/']['tools.proxy.local'] == 'X-Forwarded-Host'

    def test_cherrypy_logs(self, server_config):
        locallibrary.CHERRYPYLOG = 1
        options_dict, conf, protocol = webStart.build_config(options())
        assert options_dict['log.access_file'] == os.path.join(server_config['LOGDIR'], 'cherrypy.access.log')


class TestInitialize:
    """Tests for initialize()."""

    def test_port_in_use_exits(self, server_config):
        with patch('locallibrary.webStart.cherrypy') as mock_cherrypy, \
                patch('locallibrary.webStart.portend.Checker', autospec=True) as mock_checker:
            mock_checker.return_value.assert_free.side_effect = OSError('Port 3000 not free')
            with pytest.raises(SystemExit):
                webStart.initialize(options())
            mock_cherrypy.server.start.assert_not_called()

    def test_starts_server(self, server_config):
        with patch('locallibrary.webStart.cherrypy') as mock_cherrypy, \
                patch('locallibrary.webStart.portend.Checker', autospec=True):
            webStart.initialize(options())
        mock_cherrypy.tree.mount.assert_called_once()
        mock_cherrypy.server.start.assert_called_once_with()
        mock_cherrypy.server.wait.assert_called_once_with()
