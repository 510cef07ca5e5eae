#!/usr/bin/env python3
#SBATCH --job-name chain
#SBATCH --nodes=1
#SBATCH --num-tasks=1
#SBATCH --cpus-per-task=1

import subprocess
import sys

from stepup.chain.stage import stage_input

stage_input("input.in")
sys.exit(subprocess.run(["./a.out"], check=False).returncode)
