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
Configuration loader for LocalLibrary.

config.ini itself is read and written by the package (config_read and
config_write), this turns the flat CONFIG dict those fill into the typed
Configuration so it can be validated at startup.
"""

from typing import Any, Dict

from locallibrary.config.settings import Configuration


class ConfigLoader:
    """Builds a Configuration from the runtime CONFIG dict."""

    def from_legacy_dict(self, legacy_config: Dict[str, Any]) -> Configuration:
        """Create a Configuration from a CONFIG dictionary, ignoring unknown keys."""
        config = Configuration()
        for key in Configuration.KEY_MAPPING:
            if key in legacy_config:
                default = config.get(key)
                if isinstance(default, bool):
                    value = self._get_bool(legacy_config, key, default)
                elif isinstance(default, int):
                    value = self._get_int(legacy_config, key, default)
                else:
                    value = legacy_config.get(key) or default
                config.set(key, value)
        return config

    def _get_int(self, source: Dict, key: str, default: int = 0) -> int:
        """Get an integer value from a dictionary."""
        value = source.get(key, default)
        if isinstance(value, int):
            return value
        try:
            return int(value)
        except (ValueError, TypeError):
            return default

    def _get_bool(self, source: Dict, key: str, default: bool = False) -> bool:
        """Get a boolean value from a dictionary."""
        value = source.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return value != 0
        if isinstance(value, str):
            return value.lower() in ('true', '1', 'yes', 'on')
        return default
