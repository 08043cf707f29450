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

import datetime
import re
import unicodedata

# yyyy, yyyy-mm, yyyy-mm-dd or yyyymmdd, a time and offset only after a full date
ISO_DATE = re.compile(
    r"^(?P<year>\d{4})"
    r"(?:-(?P<month>\d{2})(?:-(?P<day>\d{2}))?|(?P<bmonth>\d{2})(?P<bday>\d{2}))?"
    r"(?:[T ](?P<hour>\d{2}):(?P<minute>\d{2})(?::(?P<second>\d{2})(?:[.,]\d+)?)?"
    r"(?:Z|[+-]\d{2}(?::?\d{2})?)?)?$")


def check_int(var, default, positive=True):
    """
    Return an integer representation of var
    or return default value if var is not a positive integer
    """
    try:
        res = int(var)
        if positive and res < 0:
            return default
        return res
    except (ValueError, TypeError):
        return default


def makeUnicode(txt):
    # convert a bytestring to unicode, don't know what encoding it might be so try a few
    # it could be a file on a windows filesystem, unix...
    if not txt:
        return u''
    elif isinstance(txt, str):
        return txt
    elif isinstance(txt, bytes):
        for encoding in ['utf-8', 'latin-1']:
            try:
                return txt.decode(encoding)
            except UnicodeError:
                pass
        return txt.decode('utf-8', 'replace')
    return str(txt)


def unaccented(str_or_unicode):
    if not str_or_unicode:
        return u''
    text = makeUnicode(str_or_unicode)
    # letters that don't decompose
    text = text.replace(u'\xc6', u'AE').replace(u'\xe6', u'ae').replace(u'\xdf', u'ss')
    text = text.replace(u'\xd8', u'O').replace(u'\xf8', u'o')
    return u''.join(c for c in unicodedata.normalize('NFKD', text) if not unicodedata.combining(c))


def plural(var):
    """
    Convenience function for log messages, if var = 1 return ''
    if var is anything else return 's'
    so book -> books, seeder -> seeders  etc
    """
    if check_int(var, 0) == 1:
        return ''
    return 's'


def today():
    """
    Return todays date in format yyyy-mm-dd
    """
    return datetime.date.today().isoformat()


def to_date(value):
    """
    Turn a stored or submitted value into a datetime.date
    Accepts date, datetime, or an ISO-8601 string (date or date-time)
    Returns None for empty or unparseable values
    """
    if not value:
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return parse_iso_date(makeUnicode(value).strip())


def parse_iso_date(value):
    """
    datetime.date for an ISO-8601 date or date-time string, None if it isn't one
    A missing month or day counts as 1, the time part is checked then dropped
    """
    match = ISO_DATE.match(value or '')
    if not match:
        return None
    parts = match.groupdict()
    month = parts['month'] or parts['bmonth'] or 1
    day = parts['day'] or parts['bday'] or 1
    if parts['hour'] is not None:
        if not (parts['day'] or parts['bday']):
            return None
        if int(parts['hour']) > 23 or int(parts['minute']) > 59 or int(parts['second'] or 0) > 59:
            return None
    try:
        return datetime.date(int(parts['year']), int(month), int(day))
    except ValueError:
        return None


def dateFormat(value):
    """ yyyy-mm-dd for a date, or empty string if there is no date """
    d = to_date(value)
    if not d:
        return ''
    return d.isoformat()


def displayDate(value):
    """ Medium display format, eg Jan 5, 2024 """
    d = to_date(value)
    if not d:
        return ''
    return '%s %d, %d' % (d.strftime('%b'), d.day, d.year)
