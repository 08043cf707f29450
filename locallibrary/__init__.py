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
import os
import sys
import threading
import webbrowser

import cherrypy
from locallibrary import logger, database
from locallibrary.database_v2 import MigrationRunner
from locallibrary.formatter import check_int, makeUnicode

# Transient globals NOT stored in config
# These are used/modified by LocalLibrary.py before config.ini is read
FULL_PATH = None
PROG_DIR = None
DAEMON = False
SIGNAL = None
PIDFILE = ''
DATADIR = ''
CONFIGFILE = ''
SYS_ENCODING = ''
LOGLEVEL = 1
CONFIG = {}
CFG = ''
DBFILE = None
CHERRYPYLOG = 0

# These are only used in startup
INIT_LOCK = threading.Lock()
__INITIALIZED__ = False
started = False

# extended loglevels
log_dbcomms = 1 << 5  # 32 database comms
log_serverside = 1 << 8  # 256 serverside processing

# These are the items in config.ini
# Any undefined on startup will be set to the default value
CONFIG_DEFINITIONS = {
    # Name      Type   Section   Default
    'LOGDIR': ('str', 'General', ''),
    'LOGFILES': ('int', 'General', 10),
    'LOGSIZE': ('int', 'General', 204800),
    'LOGLEVEL': ('int', 'General', 1),
    'HTTP_PORT': ('int', 'General', 3000),
    'HTTP_HOST': ('str', 'General', '0.0.0.0'),
    'HTTP_USER': ('str', 'General', ''),
    'HTTP_PASS': ('str', 'General', ''),
    'HTTP_PROXY': ('bool', 'General', 0),
    'HTTP_THREADS': ('int', 'General', 10),
    'HTTPS_ENABLED': ('bool', 'General', 0),
    'HTTPS_CERT': ('str', 'General', ''),
    'HTTPS_KEY': ('str', 'General', ''),
    'LAUNCH_BROWSER': ('bool', 'General', 1),
    'PROXY_LOCAL': ('str', 'General', ''),
    'CHERRYPYLOG': ('bool', 'General', 0),
}


def check_section(sec):
    """ Check if INI section exists, if not create it """
    # noinspection PyUnresolvedReferences
    if CFG.has_section(sec):
        return True
    else:
        # noinspection PyUnresolvedReferences
        CFG.add_section(sec)
        return False


def check_setting(cfg_type, cfg_name, item_name, def_val, log=True):
    """ Check option exists, coerce to correct type, or return default"""
    my_val = def_val
    if cfg_type == 'int':
        try:
            # noinspection PyUnresolvedReferences
            my_val = CFG.getint(cfg_name, item_name)
        except configparser.Error:
            # no such item, might be a new entry
            my_val = int(def_val)
        except Exception as e:
            logger.warn('Invalid int for %s: %s, using default %s' % (cfg_name, item_name, int(def_val)))
            logger.debug(str(e))
            my_val = int(def_val)

    elif cfg_type == 'bool':
        try:
            # noinspection PyUnresolvedReferences
            my_val = CFG.getboolean(cfg_name, item_name)
        except configparser.Error:
            my_val = bool(def_val)
        except Exception as e:
            logger.warn('Invalid bool for %s: %s, using default %s' % (cfg_name, item_name, bool(def_val)))
            logger.debug(str(e))
            my_val = bool(def_val)

    elif cfg_type == 'str':
        try:
            # noinspection PyUnresolvedReferences
            my_val = CFG.get(cfg_name, item_name)
            # ConfigParser keeps surrounding quotes
            if my_val.startswith('"') and my_val.endswith('"'):
                my_val = my_val[1:-1]
            if not len(my_val):
                my_val = def_val
        except configparser.Error:
            my_val = str(def_val)
        except Exception as e:
            logger.warn('Invalid str for %s: %s, using default %s' % (cfg_name, item_name, str(def_val)))
            logger.debug(str(e))
            my_val = str(def_val)
        finally:
            my_val = makeUnicode(my_val)

    check_section(cfg_name)
    # noinspection PyUnresolvedReferences
    CFG.set(cfg_name, item_name, str(my_val))
    if log:
        logger.debug("%s : %s -> %s" % (cfg_name, item_name, my_val))

    return my_val


def initialize():
    global LOGLEVEL, CONFIG, __INITIALIZED__

    with INIT_LOCK:

        if __INITIALIZED__:
            return False

        check_section('General')
        # False to silence logging until logger initialised
        for key in ['LOGFILES', 'LOGSIZE', 'LOGDIR']:
            item_type, section, default = CONFIG_DEFINITIONS[key]
            CONFIG[key.upper()] = check_setting(item_type, section, key.lower(), default, log=False)

        if not CONFIG['LOGDIR']:
            CONFIG['LOGDIR'] = os.path.join(DATADIR, 'Logs')

        # Create logdir
        if not os.path.isdir(CONFIG['LOGDIR']):
            try:
                os.makedirs(CONFIG['LOGDIR'])
            except OSError as e:
                print('%s : Unable to create folder for logs: %s' % (CONFIG['LOGDIR'], str(e)))

        # Start the logger, silence console logging if we need to
        CFGLOGLEVEL = check_int(check_setting('int', 'General', 'loglevel', 9, log=False), 9)
        if LOGLEVEL == 1:  # default if no debug or quiet on cmdline
            if CFGLOGLEVEL == 9:  # default value if none in config
                LOGLEVEL = 1
            else:
                LOGLEVEL = CFGLOGLEVEL

        CONFIG['LOGLEVEL'] = LOGLEVEL
        logger.locallibrary_log.initLogger(loglevel=CONFIG['LOGLEVEL'])
        logger.info("Log level set to [%s]- Log Directory is [%s] - Config level is [%s]" % (
            CONFIG['LOGLEVEL'], CONFIG['LOGDIR'], CFGLOGLEVEL))
        if CONFIG['LOGLEVEL'] > 2:
            logger.info("Screen Log set to EXTENDED DEBUG")
        elif CONFIG['LOGLEVEL'] == 2:
            logger.info("Screen Log set to DEBUG")
        elif CONFIG['LOGLEVEL'] == 1:
            logger.info("Screen Log set to INFO")
        else:
            logger.info("Screen Log set to WARN/ERROR")

        config_read()
        # first start, write out the defaults
        if not os.path.isfile(CONFIGFILE):
            config_write()

        # Initialize the database
        try:
            myDB = database.DBConnection()
            result = myDB.match('PRAGMA user_version')
            check = myDB.match('PRAGMA integrity_check')
            if result:
                version = result[0]
            else:
                version = 0
            logger.info("Database is version %s, integrity check: %s" % (version, check[0]))
        except Exception as e:
            logger.error("Can't connect to the database: %s %s" % (type(e).__name__, str(e)))
            sys.exit(0)

        runner = MigrationRunner(myDB)
        if runner.needs_upgrade():
            runner.run()

        __INITIALIZED__ = True
        return True


# noinspection PyUnresolvedReferences
def config_read():
    global CONFIG, CHERRYPYLOG

    for key in list(CONFIG_DEFINITIONS.keys()):
        item_type, section, default = CONFIG_DEFINITIONS[key]
        CONFIG[key.upper()] = check_setting(item_type, section, key.lower(), default)

    if not CONFIG['LOGDIR']:
        CONFIG['LOGDIR'] = os.path.join(DATADIR, 'Logs')
    if CONFIG['HTTP_PORT'] < 21 or CONFIG['HTTP_PORT'] > 65535:
        CONFIG['HTTP_PORT'] = 3000
    CHERRYPYLOG = CONFIG['CHERRYPYLOG']

    logger.info('Config file loaded')


# noinspection PyUnresolvedReferences
def config_write():
    global LOGLEVEL

    currentname = threading.current_thread().name
    threading.current_thread().name = "CONFIG_WRITE"

    for key in list(CONFIG_DEFINITIONS.keys()):
        item_type, section, default = CONFIG_DEFINITIONS[key]
        check_section(section)
        value = CONFIG[key]
        if key == 'LOGLEVEL':
            LOGLEVEL = check_int(value, 1)
        if isinstance(value, str):
            value = value.strip()
        CFG.set(section, key.lower(), str(value))

    # sanity check for typos...
    for key in list(CONFIG.keys()):
        if key not in list(CONFIG_DEFINITIONS.keys()):
            logger.warn('Unsaved/invalid config key: %s' % key)

    msg = None
    try:
        with open(CONFIGFILE + '.new', 'w') as configfile:
            CFG.write(configfile)
    except Exception as e:
        msg = '{} {} {} {}'.format('Unable to create new config file:', CONFIGFILE, type(e).__name__, str(e))
        logger.warn(msg)
        threading.current_thread().name = currentname
        return
    try:
        os.remove(CONFIGFILE + '.bak')
    except FileNotFoundError:
        pass
    except OSError as e:
        msg = '{} {}{} {} {}'.format(type(e).__name__, 'deleting backup file:', CONFIGFILE, '.bak', e.strerror)
        logger.warn(msg)
    try:
        os.rename(CONFIGFILE, CONFIGFILE + '.bak')
    except FileNotFoundError:
        pass  # wouldn't exist until first save
    except OSError as e:
        msg = '{} {} {} {}'.format('Unable to backup config file:', CONFIGFILE, type(e).__name__, e.strerror)
        logger.warn(msg)
    try:
        os.rename(CONFIGFILE + '.new', CONFIGFILE)
    except OSError as e:
        msg = '{} {} {} {}'.format('Unable to rename new config file:', CONFIGFILE, type(e).__name__, e.strerror)
        logger.warn(msg)

    if not msg:
        msg = 'Config file [%s] has been updated' % CONFIGFILE
        logger.info(msg)

    threading.current_thread().name = currentname


def daemonize():
    """
    Fork off as a daemon
    """
    threadcount = threading.active_count()
    if threadcount != 1:
        logger.warn('There are %d active threads. Daemonizing may cause strange behavior.' % threadcount)

    sys.stdout.flush()
    sys.stderr.flush()

    # Make a non-session-leader child process
    try:
        pid = os.fork()  # @UndefinedVariable - only available in UNIX
        if pid != 0:
            sys.exit(0)
    except OSError as e:
        raise RuntimeError("1st fork failed: %s [%d]" % (e.strerror, e.errno))

    os.setsid()  # @UndefinedVariable - only available in UNIX

    # Make sure I can read my own files and shut out others
    prev = os.umask(0)
    os.umask(prev and int('077', 8))

    # Make the child a session-leader by detaching from the terminal
    try:
        pid = os.fork()  # @UndefinedVariable - only available in UNIX
        if pid != 0:
            sys.exit(0)
    except OSError as e:
        raise RuntimeError("2nd fork failed: %s [%d]" % (e.strerror, e.errno))

    si = open('/dev/null', "r")
    so = open('/dev/null', "a+")
    se = open('/dev/null', "a+")

    os.dup2(si.fileno(), sys.stdin.fileno())
    os.dup2(so.fileno(), sys.stdout.fileno())
    os.dup2(se.fileno(), sys.stderr.fileno())

    pid = os.getpid()
    logger.debug("Daemonized to PID %d" % pid)

    if PIDFILE:
        logger.debug("Writing PID %d to %s" % (pid, PIDFILE))
        with open(PIDFILE, 'w') as pidfile:
            pidfile.write("%s\n" % pid)


def launch_browser(host, port):
    if host == '0.0.0.0':
        host = 'localhost'

    if CONFIG['HTTPS_ENABLED']:
        protocol = 'https'
    else:
        protocol = 'http'

    try:
        webbrowser.open('%s://%s:%i/catalog' % (protocol, host, port))
    except Exception as e:
        logger.error('Could not launch browser:%s  %s' % (type(e).__name__, str(e)))


def start():
    global started

    if __INITIALIZED__:
        started = True


def shutdown():
    cherrypy.engine.exit()

    logger.info('LocalLibrary is shutting down...')

    if PIDFILE:
        logger.info('Removing pidfile %s' % PIDFILE)
        os.remove(PIDFILE)

    logger.info('LocalLibrary is exiting')
    sys.exit(0)
