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
"""Tool to submit a chain of SLURM jobs, one per input file."""

import argparse
import os
import sys

from path import Path

from stepup.core.worker import WorkThread

from .chain import ChainError, UsageError, prepare_runs, submit_chain
from .submit import CONDITION, INPUT_VAR, TEMPLATE, SbatchSubmitter, check_template

__all__ = ("chain_subcommand", "chain_tool", "main", "submit_inputs")


USAGE = """\

  Usage: stepup chain input_run1.in input_run2.in input_run3.in ...

  Each argument is an input file with the settings for that run.
  Jobs are chained: each run starts only after the previous one
  finishes successfully (exit code 0).
"""


def submit_inputs(inputs: list[str], submitter: SbatchSubmitter) -> list[str]:
    """Check the template and all inputs, then submit one chained job per input.

    Nothing is submitted unless the job template and all input files are present.
    """
    if len(inputs) == 0:
        raise UsageError("No input files given.")
    check_template(submitter.path_template)
    runs = prepare_runs(inputs)

    print()
    print("======================================")
    print("  Submitting job chain")
    print(f"  Working dir : {Path.cwd()}")
    print(f"  Job script  : {submitter.path_template}")
    print(f"  Total runs  : {len(runs)}")
    print("======================================")
    print()

    jobids = submit_chain(runs, submitter)

    user = os.getenv("USER", "$USER")
    print()
    print("======================================")
    print(f"  All {len(jobids)} jobs submitted!")
    print(f"  Monitor:    squeue -u {user}")
    print(f"  Cancel all: scancel --user={user}")
    print("======================================")
    print()
    return jobids


def chain_tool(args: argparse.Namespace):
    """Submit the input files as a chain and exit with a non-zero status on failure."""
    submitter = SbatchSubmitter(
        WorkThread("stepup chain"), args.template, args.input_var, args.condition, args.rc
    )
    try:
        submit_inputs(args.inputs, submitter)
    except UsageError:
        print(USAGE)
        sys.exit(1)
    except ChainError as exc:
        print()
        print(f"ERROR: {exc}")
        sys.exit(1)


def add_arguments(parser: argparse.ArgumentParser):
    parser.add_argument(
        "inputs",
        nargs="*",
        help="Input files, one per job, in the order in which the jobs must run.",
    )
    parser.add_argument(
        "-t",
        "--template",
        default=TEMPLATE,
        help="The job template submitted for every input file. [default=%(default)s]",
    )
    parser.add_argument(
        "-e",
        "--input-var",
        default=INPUT_VAR,
        help="Environment variable through which each job receives "
        "the absolute path of its input file. [default=%(default)s]",
    )
    parser.add_argument(
        "-d",
        "--condition",
        default=CONDITION,
        help="SLURM dependency type to wait for the previous job. [default=%(default)s]",
    )
    parser.add_argument(
        "--rc",
        default=None,
        help="A resource configuration to be executed in the same shell, right before sbatch. "
        "For example: 'module swap cluster/something'.",
    )


def chain_subcommand(subparser: argparse.ArgumentParser) -> callable:
    parser = subparser.add_parser(
        "chain",
        help="Submit a chain of SLURM jobs, each starting after its predecessor succeeded.",
    )
    add_arguments(parser)
    return chain_tool


def main(argv: list[str] | None = None):
    """Standalone entry point, equivalent to ``stepup chain``."""
    parser = argparse.ArgumentParser(
        prog="stepup-chain",
        description="Submit a chain of SLURM jobs, each starting after its predecessor succeeded.",
    )
    add_arguments(parser)
    chain_tool(parser.parse_args(argv))
