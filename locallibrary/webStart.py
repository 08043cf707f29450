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

import os
import sys

import cherrypy
import portend
import locallibrary
from locallibrary import logger
from locallibrary.webServe import WebInterface, error_page


def build_config(options):
    """
    Global cherrypy settings and the per-path app config for the given options
    Returns (global_dict, app_conf, protocol)
    """
    https_enabled = options['https_enabled']
    https_cert = options['https_cert']
    https_key = options['https_key']

    if https_enabled:
        if not (os.path.exists(https_cert) and os.path.exists(https_key)):
            logger.warn("Disabled HTTPS because of missing certificate and key.")
            https_enabled = False

    options_dict = {
        'log.screen': False,
        'server.thread_pool': options.get('http_threads', 10),
        'server.socket_port': options['http_port'],
        'server.socket_host': options['http_host'],
        'engine.autoreload.on': False,
        'tools.encode.on': True,
        'tools.encode.encoding': 'utf-8',
        'tools.decode.on': True,
        'error_page.default': error_page,
    }

    if https_enabled:
        options_dict['server.ssl_certificate'] = https_cert
        options_dict['server.ssl_private_key'] = https_key
        protocol = "https"
    else:
        protocol = "http"

    conf = {
        '/': {
            'tools.staticdir.root': os.path.join(locallibrary.PROG_DIR, 'data'),
            'tools.proxy.on': options['http_proxy']  # pay attention to X-Forwarded-Proto header
        },
        '/css': {
            'tools.staticdir.on': True,
            'tools.staticdir.dir': os.path.join(locallibrary.PROG_DIR, 'data', 'css')
        },
    }

    if locallibrary.CONFIG.get('PROXY_LOCAL'):
        conf['/'].update({
            # 'X-Forwarded-Host' for apache2, 'Host' for nginx, 'X-Host' for lighttpd
            'tools.proxy.local': locallibrary.CONFIG['PROXY_LOCAL']
        })
    if options['http_pass'] != "":
        logger.info("Web server authentication is enabled, username is '%s'" % options['http_user'])
        conf['/'].update({
            'tools.auth_basic.on': True,
            'tools.auth_basic.realm': 'LocalLibrary',
            'tools.auth_basic.checkpassword': cherrypy.lib.auth_basic.checkpassword_dict({
                options['http_user']: options['http_pass']
            })
        })

    if locallibrary.CHERRYPYLOG:
        options_dict.update({
            'log.access_file': os.path.join(locallibrary.CONFIG['LOGDIR'], 'cherrypy.access.log'),
            'log.error_file': os.path.join(locallibrary.CONFIG['LOGDIR'], 'cherrypy.error.log'),
        })

    return options_dict, conf, protocol


def initialize(options=None):
    if options is None:
        options = {}

    options_dict, conf, protocol = build_config(options)

    logger.info("Starting LocalLibrary web server on %s://%s:%d/" %
                (protocol, options['http_host'], options['http_port']))
    cherrypy.config.update(options_dict)
    cherrypy.tree.mount(WebInterface(), '', config=conf)

    try:
        portend.Checker().assert_free(str(options['http_host']), options['http_port'])
        cherrypy.server.start()
    except Exception as e:
        print(str(e))
        print('Failed to start on port: %i. Is something else running?' % (options['http_port']))
        sys.exit(1)

    cherrypy.server.wait()
