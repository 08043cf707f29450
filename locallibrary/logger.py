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

import logging
import os
import platform
import sys
from logging import handlers

import locallibrary
from locallibrary import formatter

LOGGER_NAME = 'locallibrary'
DATE_FORMAT = '%d-%b-%Y %H:%M:%S'
# caller is file:function:line of whoever called debug/info/warn/error
FILE_FORMAT = '%(asctime)s - %(levelname)-7s :: %(threadName)s : %(caller)s : %(message)s'
CONSOLE_FORMAT = '%(asctime)s - %(levelname)s :: %(threadName)s : %(caller)s : %(message)s'

LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
}


class UnaccentedFilter(logging.Filter):
    """ windows cp1252 can't handle some accents """

    def filter(self, record):
        record.msg = formatter.unaccented(record.getMessage())
        record.args = ()
        return True


def _caller(depth):
    frame = sys._getframe(depth + 1)
    return '%s:%s:%s' % (os.path.basename(frame.f_code.co_filename), frame.f_code.co_name, frame.f_lineno)


class RotatingLogger(object):
    """A size-rotated file in LOGDIR, plus the console unless loglevel is 0."""

    def __init__(self, filename):
        self.filename = filename
        self.filehandler = None
        self.consolehandler = None

    def _attach(self, handler, level, fmt):
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt, DATE_FORMAT))
        if 'windows' in platform.system().lower():
            handler.addFilter(UnaccentedFilter())
        logging.getLogger(LOGGER_NAME).addHandler(handler)
        return handler

    def initLogger(self, loglevel=1):
        logging.getLogger(LOGGER_NAME).setLevel(logging.DEBUG)

        logfile = os.path.join(locallibrary.CONFIG['LOGDIR'], os.path.basename(self.filename))
        self.filehandler = self._attach(
            handlers.RotatingFileHandler(logfile, maxBytes=locallibrary.CONFIG['LOGSIZE'],
                                         backupCount=locallibrary.CONFIG['LOGFILES']),
            logging.DEBUG, FILE_FORMAT)

        if loglevel:
            console_level = logging.INFO if loglevel == 1 else logging.DEBUG
            self.consolehandler = self._attach(logging.StreamHandler(), console_level, CONSOLE_FORMAT)

    def stopLogger(self):
        lg = logging.getLogger(LOGGER_NAME)
        for handler in (self.filehandler, self.consolehandler):
            if handler:
                lg.removeHandler(handler)
                handler.close()
        self.filehandler = None
        self.consolehandler = None

    @staticmethod
    def log(message, level):
        # two frames up is the code that called debug() or one of its friends
        logging.getLogger(LOGGER_NAME).log(LEVELS.get(level, logging.ERROR), message,
                                           extra={'caller': _caller(2)})


locallibrary_log = RotatingLogger('locallibrary.log')


def debug(message):
    if locallibrary.LOGLEVEL > 1:
        locallibrary_log.log(message, level='DEBUG')


def info(message):
    if locallibrary.LOGLEVEL > 0:
        locallibrary_log.log(message, level='INFO')


def warn(message):
    locallibrary_log.log(message, level='WARNING')


def error(message):
    locallibrary_log.log(message, level='ERROR')
