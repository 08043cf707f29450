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
Typed view of the server settings.

The running process reads config.ini into the flat locallibrary.CONFIG
dict; these dataclasses give the launcher something it can validate
before the web server is started.
"""

from dataclasses import dataclass, field
from typing import Any, Dict


class ConfigError(Exception):
    """Exception raised for configuration errors."""
    pass


@dataclass
class HttpSettings:
    """HTTP server settings."""
    port: int = 3000
    host: str = '0.0.0.0'
    user: str = ''
    password: str = ''
    proxy: bool = False
    threads: int = 10

    # HTTPS settings
    https_enabled: bool = False
    https_cert: str = ''
    https_key: str = ''

    launch_browser: bool = True
    proxy_local: str = ''

    def validate(self) -> None:
        """Validate HTTP settings."""
        if self.port < 21 or self.port > 65535:
            raise ConfigError("HTTP port must be between 21 and 65535")
        if self.threads < 1:
            raise ConfigError("HTTP thread pool needs at least 1 thread")
        if self.https_enabled and not (self.https_cert and self.https_key):
            raise ConfigError("HTTPS needs both a certificate and a key file")


@dataclass
class GeneralSettings:
    """Logging settings."""
    log_dir: str = ''
    log_files: int = 10
    log_size: int = 204800
    log_level: int = 1
    cherrypy_log: bool = False

    def validate(self) -> None:
        if self.log_files < 0:
            raise ConfigError("Number of log files cannot be negative")
        if self.log_size < 1024:
            raise ConfigError("Log size must be at least 1024 bytes")


@dataclass
class Configuration:
    """Main configuration container."""
    http: HttpSettings = field(default_factory=HttpSettings)
    general: GeneralSettings = field(default_factory=GeneralSettings)

    # legacy CONFIG key -> (section, attribute)
    KEY_MAPPING = {
        'HTTP_PORT': ('http', 'port'),
        'HTTP_HOST': ('http', 'host'),
        'HTTP_USER': ('http', 'user'),
        'HTTP_PASS': ('http', 'password'),
        'HTTP_PROXY': ('http', 'proxy'),
        'HTTP_THREADS': ('http', 'threads'),
        'HTTPS_ENABLED': ('http', 'https_enabled'),
        'HTTPS_CERT': ('http', 'https_cert'),
        'HTTPS_KEY': ('http', 'https_key'),
        'LAUNCH_BROWSER': ('http', 'launch_browser'),
        'PROXY_LOCAL': ('http', 'proxy_local'),
        'LOGDIR': ('general', 'log_dir'),
        'LOGFILES': ('general', 'log_files'),
        'LOGSIZE': ('general', 'log_size'),
        'LOGLEVEL': ('general', 'log_level'),
        'CHERRYPYLOG': ('general', 'cherrypy_log'),
    }

    def validate(self) -> None:
        """Validate all configuration settings.

        Raises:
            ConfigError: If any setting is invalid
        """
        self.http.validate()
        self.general.validate()

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by its legacy CONFIG key, eg 'HTTP_PORT'"""
        if key.upper() in self.KEY_MAPPING:
            section, attr = self.KEY_MAPPING[key.upper()]
            return getattr(getattr(self, section), attr, default)
        return default

    def set(self, key: str, value: Any) -> None:
        """Set a value by its legacy CONFIG key.

        Raises:
            ConfigError: If key is not valid
        """
        if key.upper() not in self.KEY_MAPPING:
            raise ConfigError("Unknown configuration key: %s" % key)
        section, attr = self.KEY_MAPPING[key.upper()]
        setattr(getattr(self, section), attr, value)
