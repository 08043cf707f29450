#!/usr/bin/env python3
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

import configparser
import locale
import os
import platform
import sys
import threading
import time

import locallibrary
from locallibrary import webStart, logger
from locallibrary.config import ConfigError, ConfigLoader


def main():
    # rename this thread
    threading.current_thread().name = "MAIN"

    # Set paths
    if hasattr(sys, 'frozen'):
        locallibrary.FULL_PATH = os.path.abspath(sys.executable)
    else:
        locallibrary.FULL_PATH = os.path.abspath(__file__)

    locallibrary.PROG_DIR = os.path.dirname(locallibrary.FULL_PATH)

    locallibrary.SYS_ENCODING = None

    try:
        locale.setlocale(locale.LC_ALL, "")
        locallibrary.SYS_ENCODING = locale.getpreferredencoding()
    except (locale.Error, IOError):
        pass

    # for OSes that are poorly configured I'll just force UTF-8
    if not locallibrary.SYS_ENCODING or locallibrary.SYS_ENCODING in (
            'ANSI_X3.4-1968', 'US-ASCII', 'ASCII') or '1252' in locallibrary.SYS_ENCODING:
        locallibrary.SYS_ENCODING = 'UTF-8'

    # Set arguments
    from optparse import OptionParser

    p = OptionParser()
    p.add_option('-d', '--daemon', action="store_true",
                 dest='daemon', help="Run the server as a daemon")
    p.add_option('-q', '--quiet', action="store_true",
                 dest='quiet', help="Don't log to console")
    p.add_option('--debug', action="store_true",
                 dest='debug', help="Show debuglog messages")
    p.add_option('--nolaunch', action="store_true",
                 dest='nolaunch', help="Don't start browser")
    p.add_option('--port',
                 dest='port', default=None,
                 help="Force webinterface to listen on this port")
    p.add_option('--datadir',
                 dest='datadir', default=None,
                 help="Path to the data directory")
    p.add_option('--config',
                 dest='config', default=None,
                 help="Path to config.ini file")
    p.add_option('-p', '--pidfile',
                 dest='pidfile', default=None,
                 help="Store the process id in the given file")
    p.add_option('--loglevel',
                 dest='loglevel', default=None,
                 help="Debug loglevel")

    options, args = p.parse_args()

    locallibrary.LOGLEVEL = 1
    if options.debug:
        locallibrary.LOGLEVEL = 2

    if options.quiet:
        locallibrary.LOGLEVEL = 0

    if options.daemon:
        if 'windows' not in platform.system().lower():
            locallibrary.DAEMON = True
        else:
            print("Daemonize not supported under Windows, starting normally")

    if options.loglevel:
        try:
            locallibrary.LOGLEVEL = int(options.loglevel)
        except ValueError:
            print("Invalid loglevel %s, ignored" % options.loglevel)

    if options.datadir:
        locallibrary.DATADIR = str(options.datadir)
    else:
        locallibrary.DATADIR = locallibrary.PROG_DIR

    if options.config:
        locallibrary.CONFIGFILE = str(options.config)
    else:
        locallibrary.CONFIGFILE = os.path.join(locallibrary.DATADIR, "config.ini")

    if options.pidfile:
        if locallibrary.DAEMON:
            locallibrary.PIDFILE = str(options.pidfile)

    # create and check (optional) paths
    if not os.path.isdir(locallibrary.DATADIR):
        try:
            os.makedirs(locallibrary.DATADIR)
        except OSError:
            raise SystemExit('Could not create data directory: ' + locallibrary.DATADIR + '. Exit ...')

    if not os.access(locallibrary.DATADIR, os.W_OK):
        raise SystemExit('Cannot write to the data directory: ' + locallibrary.DATADIR + '. Exit ...')

    print("LocalLibrary is starting up...")

    # create database and config
    locallibrary.DBFILE = os.path.join(locallibrary.DATADIR, 'locallibrary.db')
    locallibrary.CFG = configparser.RawConfigParser()
    locallibrary.CFG.read(locallibrary.CONFIGFILE)

    # REMINDER ############ NO LOGGING BEFORE HERE ###############
    # There is no point putting in any logging above this line, as its not set till after initialize.
    locallibrary.initialize()

    if options.nolaunch:
        locallibrary.CONFIG['LAUNCH_BROWSER'] = False

    if options.port:
        locallibrary.CONFIG['HTTP_PORT'] = int(options.port)

    try:
        ConfigLoader().from_legacy_dict(locallibrary.CONFIG).validate()
    except ConfigError as e:
        logger.error("Invalid configuration: %s" % str(e))
        raise SystemExit('Invalid configuration in %s: %s. Exit ...' % (locallibrary.CONFIGFILE, str(e)))

    if locallibrary.DAEMON:
        locallibrary.daemonize()

    if options.port:
        logger.info('Starting LocalLibrary on forced port: %s' % locallibrary.CONFIG['HTTP_PORT'])
    else:
        logger.info('Starting LocalLibrary on port: %s' % locallibrary.CONFIG['HTTP_PORT'])

    # allow a bit of time for an old process to free the server port if restarting
    time.sleep(1)

    webStart.initialize({
        'http_port': locallibrary.CONFIG['HTTP_PORT'],
        'http_host': locallibrary.CONFIG['HTTP_HOST'],
        'http_threads': locallibrary.CONFIG['HTTP_THREADS'],
        'http_user': locallibrary.CONFIG['HTTP_USER'],
        'http_pass': locallibrary.CONFIG['HTTP_PASS'],
        'http_proxy': locallibrary.CONFIG['HTTP_PROXY'],
        'https_enabled': locallibrary.CONFIG['HTTPS_ENABLED'],
        'https_cert': locallibrary.CONFIG['HTTPS_CERT'],
        'https_key': locallibrary.CONFIG['HTTPS_KEY'],
    })

    if locallibrary.CONFIG['LAUNCH_BROWSER']:
        locallibrary.launch_browser(locallibrary.CONFIG['HTTP_HOST'], locallibrary.CONFIG['HTTP_PORT'])

    locallibrary.start()

    while True:
        if not locallibrary.SIGNAL:
            try:
                time.sleep(1)
            except KeyboardInterrupt:
                locallibrary.shutdown()
        else:
            if locallibrary.SIGNAL == 'shutdown':
                locallibrary.shutdown()
            locallibrary.SIGNAL = None


if __name__ == "__main__":
    main()
