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
"""Submission of a single chained job with sbatch."""

import os
import re
import shlex

from path import Path

from stepup.core.worker import WorkThread

from .chain import Run, TemplateError, TemplateNotFoundError

__all__ = ("SbatchSubmitter", "check_template", "parse_sbatch")

TEMPLATE = os.getenv("STEPUP_CHAIN_TEMPLATE", "run.sh")
INPUT_VAR = os.getenv("STEPUP_CHAIN_INPUT_VAR", "INPUT_FILE_STAGE")
CONDITION = os.getenv("STEPUP_CHAIN_CONDITION", "afterok")


RE_SBATCH_ARRAY = re.compile(r"\s*#\s*SBATCH\b.*\s(--array|-a)(=|\s|$)")
UNSUPPORTED_DIRECTIVES = [
    re.compile(r"\s*#\s*PBS\b"),
    re.compile(r"\s*#\s*BSUB\b"),
    re.compile(r"\s*#\s*COBALT\b"),
    re.compile(r"\s*#\$"),
]


def check_template(path_template: str):
    """Make sure the job template exists and can be submitted with sbatch."""
    path_template = Path(path_template)
    if not (path_template.is_file() and os.access(path_template, os.R_OK)):
        raise TemplateNotFoundError(
            f"Job template '{path_template}' not found in {Path.cwd()}."
        )
    with open(path_template) as f:
        first_line = next(f, "")
        if not first_line.startswith("#!"):
            raise TemplateError(
                f"The job template '{path_template}' must start with a shebang line."
            )
        for line in f:
            if RE_SBATCH_ARRAY.match(line):
                raise TemplateError(
                    "Array jobs cannot be chained. (Found -a or --array in the job template)"
                )
            for pattern in UNSUPPORTED_DIRECTIVES:
                if pattern.match(line):
                    raise TemplateError(
                        f"Detected unsupported scheduler directive: {line.strip()}."
                    )


def parse_sbatch(stdout: str) -> str | None:
    """Extract the job ID from the output of sbatch.

    Parameters
    ----------
    stdout
        The standard output of sbatch. With ``--parsable``, this is
        ``jobid`` or ``jobid;cluster``. Without it, it is the acknowledgment
        ``Submitted batch job jobid``, optionally followed by ``on cluster name``.
        Only the last non-empty line is used,
        so lines printed by a resource configuration or site wrapper are skipped.

    Returns
    -------
    jobid
        The job ID as an opaque string, or None if the output contains no job ID.
    """
    lines = [line.strip() for line in stdout.splitlines() if line.strip() != ""]
    if len(lines) == 0:
        return None
    words = lines[-1].split()
    if len(words) >= 4 and words[:3] == ["Submitted", "batch", "job"]:
        return words[3]
    if len(words) == 1:
        jobid = words[0].split(";")[0]
        return jobid if jobid != "" else None
    return None


class SbatchSubmitter:
    """Submit runs of a chain with sbatch, one call per run.

    Parameters
    ----------
    work_thread
        The work thread used to launch sbatch.
    path_template
        The job template submitted for every run.
    input_var
        The environment variable through which the job receives its input file.
    condition
        The SLURM dependency type used to wait for the previous job.
    rc
        A resource configuration executed in the same shell, right before sbatch.
    """

    def __init__(
        self,
        work_thread: WorkThread,
        path_template: str = TEMPLATE,
        input_var: str = INPUT_VAR,
        condition: str = CONDITION,
        rc: str | None = None,
    ):
        self.work_thread = work_thread
        self.path_template = Path(path_template)
        self.input_var = input_var
        self.condition = condition
        self.rc = rc

    def build_command(self, run: Run, previous: str | None) -> str:
        """Prepare the shell command that submits one run."""
        args = ["sbatch", "--parsable"]
        if previous is not None:
            args.append(f"--dependency={self.condition}:{previous}")
        args.append(f"--export=ALL,{self.input_var}={run.path_abs}")
        args.append(self.path_template)
        command = " ".join(shlex.quote(str(arg)) for arg in args)
        if self.rc is not None:
            command = f"{self.rc} < /dev/null && {command}"
        return command

    def submit(self, run: Run, previous: str | None) -> str | None:
        """Submit one run and return its job ID, or None if sbatch failed."""
        returncode, stdout, stderr = self.work_thread.runsh(self.build_command(run, previous))
        if not (stderr is None or stderr == ""):
            print(stderr.rstrip())
        if returncode != 0:
            print(f"sbatch failed with return code {returncode}.")
            return None
        return parse_sbatch(stdout or "")
