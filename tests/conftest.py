# StepUp Chain submits a sequence of SLURM jobs, each waiting for its predecessor.
# © 2025 Toon Verstraelen
#
# This file is part of StepUp Chain.
#
# StepUp Chain is free software; you can redistribute it and/or
# modify it under the terms of the GNU General Public License
# as published by the Free Software Foundation; either version 3
# of the License, or (at your option) any later version.
#
# StepUp Chain is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program; if not, see <http://www.gnu.org/licenses/>
#
# --
"""Shared fixtures and fakes for the StepUp Chain tests."""

import pytest
from path import Path


@pytest.fixture()
def path_tmp(tmp_path, monkeypatch) -> Path:
    """A temporary directory that is also the current working directory."""
    monkeypatch.chdir(tmp_path)
    return Path(tmp_path)


class FakeWorkThread:
    """Stands in for a WorkThread, recording commands and replaying sbatch results."""

    def __init__(self, results: list[tuple[int, str, str]]):
        self.results = list(results)
        self.commands = []

    def runsh(self, command: str, stdin: str | None = None) -> tuple[int, str, str]:
        self.commands.append(command)
        return self.results.pop(0)


class FakeSubmitter:
    """Returns job IDs from a list, one per call. None means the submission failed."""

    def __init__(self, jobids: list[str | None]):
        self.jobids = list(jobids)
        self.calls = []

    def submit(self, run, previous):
        self.calls.append((run.path_inp, previous))
        return self.jobids.pop(0)
