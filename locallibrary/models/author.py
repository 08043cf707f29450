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

import datetime
from dataclasses import dataclass
from typing import Optional

from locallibrary.formatter import dateFormat
from locallibrary.models.base import Document


@dataclass
class Author(Document):
    id: Optional[str] = None
    first_name: str = ''
    family_name: str = ''
    date_of_birth: Optional[datetime.date] = None
    date_of_death: Optional[datetime.date] = None

    table = 'authors'
    key = 'AuthorID'
    url_prefix = '/catalog/author'
    columns = {
        'first_name': 'FirstName',
        'family_name': 'FamilyName',
        'date_of_birth': 'DateOfBirth',
        'date_of_death': 'DateOfDeath',
    }
    date_fields = ('date_of_birth', 'date_of_death')

    @property
    def name(self) -> str:
        """ Family name, first name """
        return '%s, %s' % (self.family_name, self.first_name)

    @property
    def birth_date(self) -> str:
        return dateFormat(self.date_of_birth)

    @property
    def death_date(self) -> str:
        return dateFormat(self.date_of_death)
