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
Form validation and sanitization.

A Field is an ordered chain of steps for one form parameter. Sanitizers
(trim, escape, to_date) rewrite the value, validators record a FieldError
when their test fails. Every step runs in order and every failure is
collected, so a form can report all of its problems at once. Sanitizers
run whether or not validation passed, the re-rendered form shows the
cleaned values.

Usage:
    form = FormValidator(
        Field('first_name').trim().not_empty('First name must be specified.').escape(),
        Field('date_of_birth').optional().iso8601('Invalid date of birth').to_date(),
    )
    result = form.validate(kwargs)
    if result.errors:
        ...
    result.values['first_name']
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from locallibrary.formatter import makeUnicode, parse_iso_date, to_date

ALPHANUMERIC = re.compile(r'^[0-9A-Za-z]+$')

HTML_ESCAPES = {
    '&': '&amp;',
    '<': '&lt;',
    '>': '&gt;',
    '"': '&quot;',
    "'": '&#x27;',
    '/': '&#x2F;',
    '\\': '&#x5C;',
    '`': '&#96;',
}


def escape(value: str) -> str:
    """Replace & < > " ' / \\ and ` with html entities"""
    return ''.join(HTML_ESCAPES.get(c, c) for c in value)


def is_iso8601(value: str) -> bool:
    """True for yyyy, yyyy-mm, yyyy-mm-dd or yyyymmdd, optionally with a time and offset"""
    return parse_iso_date(value) is not None


@dataclass
class FieldError:
    param: str
    msg: str
    value: Any = ''


@dataclass
class ValidationResult:
    values: Dict[str, Any] = field(default_factory=dict)
    errors: List[FieldError] = field(default_factory=list)

    def is_empty(self) -> bool:
        """ True if there were no errors """
        return not self.errors

    def messages(self) -> List[str]:
        return [error.msg for error in self.errors]


class Field(object):
    """Ordered validator and sanitizer chain for one form parameter.

    With many=True the submitted value is treated as a list, a single value
    becoming a one element list, and every step is applied to each element.
    """

    def __init__(self, param: str, many: bool = False):
        self.param = param
        self.many = many
        self.is_optional = False
        self.steps = []  # (kind, function, message)

    def _sanitizer(self, func: Callable[[Any], Any]) -> 'Field':
        self.steps.append(('sanitize', func, None))
        return self

    def _validator(self, test: Callable[[Any], bool], msg: str) -> 'Field':
        self.steps.append(('validate', test, msg))
        return self

    def optional(self) -> 'Field':
        """ Skip the validators when the value is missing or empty """
        self.is_optional = True
        return self

    def trim(self) -> 'Field':
        return self._sanitizer(lambda v: v.strip() if isinstance(v, str) else v)

    def escape(self) -> 'Field':
        return self._sanitizer(lambda v: escape(v) if isinstance(v, str) else v)

    def to_date(self) -> 'Field':
        return self._sanitizer(to_date)

    def not_empty(self, msg: str) -> 'Field':
        return self._validator(lambda v: len(v) > 0, msg)

    def length(self, msg: str, min_len: int = 0, max_len: Optional[int] = None) -> 'Field':
        return self._validator(lambda v: min_len <= len(v) and (max_len is None or len(v) <= max_len), msg)

    def alphanumeric(self, msg: str) -> 'Field':
        return self._validator(lambda v: bool(ALPHANUMERIC.match(v)), msg)

    def iso8601(self, msg: str) -> 'Field':
        return self._validator(is_iso8601, msg)

    def is_in(self, allowed: Iterable[str], msg: str) -> 'Field':
        allowed = list(allowed)
        return self._validator(lambda v: v in allowed, msg)

    def exists(self, model, msg: str) -> 'Field':
        """ Value must be the id of an existing record, empty values are left to not_empty """
        return self._validator(lambda v: not v or model.find_by_id(v) is not None, msg)

    def _raw(self, form: Dict[str, Any]) -> Any:
        value = form.get(self.param)
        if self.many:
            if value is None or value == '':
                return []
            if not isinstance(value, (list, tuple)):
                value = [value]
            return [makeUnicode(v) for v in value if v is not None and v != '']
        if value is None:
            return ''
        return makeUnicode(value)

    def run(self, form: Dict[str, Any]):
        """ Returns the sanitized value and the list of FieldErrors """
        value = self._raw(form)
        errors = []
        if self.many:
            values = []
            for item in value:
                item, item_errors = self._apply(item)
                errors.extend(item_errors)
                # blank after trim, nothing was chosen
                if item is not None and item != '':
                    values.append(item)
            return values, errors
        return self._apply(value)

    def _apply(self, value: Any):
        errors = []
        skip_validators = self.is_optional and not value
        for kind, func, msg in self.steps:
            if kind == 'sanitize':
                value = func(value)
            elif not skip_validators and not func(value):
                errors.append(FieldError(param=self.param, msg=msg, value=value))
        return value, errors


class FormValidator(object):
    """Runs a set of Field chains over submitted form data."""

    def __init__(self, *fields: Field):
        self.fields = fields

    def validate(self, form: Dict[str, Any]) -> ValidationResult:
        result = ValidationResult()
        for chain in self.fields:
            value, errors = chain.run(form)
            result.values[chain.param] = value
            result.errors.extend(errors)
        return result
