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
"""Helpers for job scripts that are submitted as part of a chain."""

import os
import shutil

from path import Path

from .submit import INPUT_VAR

__all__ = ("stage_input",)


def stage_input(dest: str = "input.in", input_var: str = INPUT_VAR) -> Path | None:
    """Copy the input file of this run to the file name the simulation expects.

    Call this at the start of a (Python) job script.
    When the job was not submitted as part of a chain,
    the environment variable is not set and nothing is copied.

    Parameters
    ----------
    dest
        The file name under which the input is expected, relative to the working directory.
    input_var
        The environment variable containing the absolute path of the input file.

    Returns
    -------
    path_dest
        The staged input file, or None if no input file was staged.
    """
    path_src = os.getenv(input_var)
    if path_src is None or path_src == "":
        return None
    path_src = Path(path_src)
    if not path_src.is_file():
        return None
    path_dest = Path(dest)
    print(f"Using input file: {path_src}")
    if path_src.absolute() != path_dest.absolute():
        shutil.copyfile(path_src, path_dest)
    return path_dest
