#  This file is part of LocalLibrary.
#
#  LocalLibrary is free software: you can redistribute it and/or modify
#  it under the terms of the GNU General Public License as published by
#  the Free Software Foundation, either version 3 of the License, or
#  (at your option) any later version.
#
#  LocalLibrary is distributed in the hope that it will be useful,
#  but WITHOUT ANY WARRANTY; without even the implied warranty of
#  MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#  GNU General Public License for more details.
#
#  You should have received a copy of the GNU General Public License
#  along with LocalLibrary.  If not, see <http://www.gnu.org/licenses/>.

"""Unit tests for locallibrary.parallel."""

import threading
import time

import pytest

from locallibrary.parallel import run_parallel


class TestRunParallel:
    """Tests for run_parallel()."""

    def test_results_keyed_by_name(self):
        results = run_parallel(a=lambda: 1, b=lambda: 'two')
        assert results == {'a': 1, 'b': 'two'}

    def test_no_tasks(self):
        assert run_parallel() == {}

    def test_tasks_run_on_worker_threads(self):
        results = run_parallel(name=lambda: threading.current_thread().name)
        assert results['name'].startswith('PARALLEL')

    def test_tasks_overlap(self):
        """Two tasks that wait on each other only finish if they run at the same time."""
        barrier = threading.Barrier(2, timeout=5)
        results = run_parallel(a=barrier.wait, b=barrier.wait)
        assert sorted(results.values()) == [0, 1]

    def test_failure_is_raised(self):
        def broken():
            raise KeyError('missing')

        with pytest.raises(KeyError):
            run_parallel(ok=lambda: 1, broken=broken)

    def test_failure_raised_once_running_tasks_finish(self):
        """The task that failed is raised, a slower task still running is allowed to end."""
        finished = []

        def slow():
            time.sleep(0.1)
            finished.append('slow')

        def broken():
            raise RuntimeError('broken')

        with pytest.raises(RuntimeError):
            run_parallel(slow=slow, broken=broken)
        assert finished == ['slow']
