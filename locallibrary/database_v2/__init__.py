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
Database module for LocalLibrary.

This module provides the migration framework and registers the
catalog schema migrations.
"""

from locallibrary.database_v2.migration_framework import (
    Migration,
    MigrationRegistry,
    MigrationRunner,
    MigrationError,
    migration,
)
from locallibrary.database_v2 import migrations  # noqa: F401  registers the schema

__all__ = [
    'Migration',
    'MigrationRegistry',
    'MigrationRunner',
    'MigrationError',
    'migration',
]
