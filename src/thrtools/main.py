"""
Command line entry point: ``thrtools <command> [arguments]``.
"""

from thrtools.process.thr_fix import main as thr_fix_main
from thrtools.process.big_run import main as big_run_main
from thrtools.util import dispatch_main

COMMANDS = {
    "thrfix": thr_fix_main,
    "bigrun": big_run_main,
}


def main(argv=None):
    dispatch_main(COMMANDS, argv=argv, prog="thrtools")
