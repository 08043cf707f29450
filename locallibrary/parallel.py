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

from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict

from locallibrary import logger


def run_parallel(**tasks: Callable[[], Any]) -> Dict[str, Any]:
    """Run independent zero-argument callables on their own threads and join.

    Returns a dict of results keyed like the arguments. If any task raises,
    tasks not yet started are cancelled and the first failure (in argument
    order among those that failed) is re-raised once running tasks finish.

    Each task has to open its own DBConnection, sqlite connections can't be
    shared between threads.
    """
    if not tasks:
        return {}

    with ThreadPoolExecutor(max_workers=len(tasks), thread_name_prefix='PARALLEL') as executor:
        futures = dict((name, executor.submit(func)) for name, func in tasks.items())
        done, not_done = wait(futures.values(), return_when=FIRST_EXCEPTION)
        for future in not_done:
            future.cancel()

        for name, future in futures.items():
            if future in done and future.exception() is not None:
                error = future.exception()
                logger.debug('Parallel task %s failed: %s %s' % (name, type(error).__name__, str(error)))
                raise error

    return dict((name, future.result()) for name, future in futures.items())
