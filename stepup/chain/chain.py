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
"""Validate a sequence of input files and submit them as a chain of dependent jobs."""

import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Protocol

from path import Path

__all__ = (
    "ChainError",
    "InputNotFoundError",
    "Run",
    "SubmissionFailure",
    "Submitter",
    "TemplateError",
    "TemplateNotFoundError",
    "UsageError",
    "format_run",
    "prepare_runs",
    "submit_chain",
)


class ChainError(Exception):
    """Base class for all errors that abort the submission of a chain."""


class UsageError(ChainError):
    """No input files were given."""


class TemplateNotFoundError(ChainError):
    """The job template does not exist or cannot be read."""


class TemplateError(ChainError):
    """The job template cannot be submitted with sbatch."""


class InputNotFoundError(ChainError):
    """One of the input files does not exist or cannot be read."""


class SubmissionFailure(ChainError):
    """The submission command did not return a job ID."""


@dataclass
class Run:
    """One job in the chain.

    Attributes
    ----------
    index
        Position in the chain, starting at 1.
    path_inp
        The input file as given on the command line.
    path_abs
        The absolute path of the input file, passed on to the job.
    jobid
        The job ID assigned by SLURM, set once the job is submitted.
        It is never interpreted, only used in dependency clauses.
    """

    index: int
    path_inp: Path
    path_abs: Path
    jobid: str | None = None


def prepare_runs(paths: Iterable[str]) -> list[Run]:
    """Check all input files before anything is submitted.

    Parameters
    ----------
    paths
        The input files, one per job, in the order they must run.

    Returns
    -------
    runs
        One run descriptor per input file, without job IDs.
    """
    runs = []
    for index, path_inp in enumerate(paths, start=1):
        path_inp = Path(path_inp)
        if not (path_inp.is_file() and os.access(path_inp, os.R_OK)):
            raise InputNotFoundError(
                f"Input file '{path_inp}' not found. Please check the filename."
            )
        runs.append(Run(index, path_inp, path_inp.absolute()))
    if len(runs) == 0:
        raise UsageError("At least one input file is required.")
    return runs


def format_run(run: Run, previous: str | None) -> str:
    """Describe a submitted run in one line."""
    line = f"  Run {run.index} → Job ID: {run.jobid}  |  Input: {run.path_inp}  |  "
    if previous is None:
        return line + "Starts: immediately"
    return line + f"Waiting on: Job {previous}"


class Submitter(Protocol):
    """Submits a single run, given the job ID of its predecessor (None for the first run)."""

    def submit(self, run: Run, previous: str | None) -> str | None: ...


def submit_chain(
    runs: list[Run], submitter: Submitter, report: Callable[[str], None] = print
) -> list[str]:
    """Submit all runs, each one depending on the successful completion of its predecessor.

    Parameters
    ----------
    runs
        Validated run descriptors, see `prepare_runs`.
    submitter
        Submits one run at a time, see `Submitter`.
        A missing job ID means the submission failed.
    report
        Called with one status line per submitted run.

    Returns
    -------
    jobids
        The job IDs in the order of submission.

    Notes
    -----
    When a submission fails, the remaining runs are not submitted.
    Jobs that were already submitted stay in the queue:
    SLURM cancels or holds their dependents, not this function.
    """
    jobids = []
    previous = None
    for run in runs:
        jobid = submitter.submit(run, previous)
        if not jobid:
            raise SubmissionFailure(
                f"Submission failed for '{run.path_inp}'. Stopping.\n"
                "Check that the job template is valid and that sbatch is available."
            )
        run.jobid = jobid
        report(format_run(run, previous))
        jobids.append(jobid)
        previous = jobid
    return jobids
