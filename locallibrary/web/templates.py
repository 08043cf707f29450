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
Template rendering utilities for the LocalLibrary web interface.
"""

import os
import threading
from typing import Any

import locallibrary
from locallibrary import logger
from mako import exceptions
from mako.lookup import TemplateLookup


def get_template_lookup() -> TemplateLookup:
    """Get the Mako template lookup for the default interface.

    Returns:
        TemplateLookup instance for data/interfaces/default
    """
    template_dir = os.path.join(str(locallibrary.PROG_DIR), 'data', 'interfaces', 'default')

    return TemplateLookup(directories=[template_dir], input_encoding='utf-8')


def serve_template(templatename: str, **kwargs: Any) -> str:
    """Render a template with the given data bag.

    Stored text is html-escaped when it is saved, so templates write
    values out unfiltered.

    Args:
        templatename: The template file to render
        **kwargs: Context variables passed to the template

    Returns:
        The rendered HTML string, or the Mako error page if rendering fails
    """
    threading.current_thread().name = "WEBSERVER"

    _hplookup = get_template_lookup()

    try:
        if locallibrary.LOGLEVEL & locallibrary.log_serverside:
            logger.debug("Rendering %s" % templatename)
        kwargs.setdefault('title', 'Local Library')
        kwargs.setdefault('errors', [])
        template = _hplookup.get_template(templatename)
        return template.render(**kwargs)

    except Exception as e:
        logger.error("Unable to render %s: %s %s" % (templatename, type(e).__name__, str(e)))
        return exceptions.html_error_template().render()
