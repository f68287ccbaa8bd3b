"""
Command executor for cmdfy
"""

import logging
import os
import subprocess
import sys
from typing import List, Optional

from .errors import ExecutionError

logger = logging.getLogger(__name__)


def default_shell() -> str:
    """The user's shell, falling back to a platform default"""
    shell = os.environ.get("SHELL", "")
    if shell:
        return shell
    return "powershell" if sys.platform == "win32" else "/bin/bash"


class CommandExecutor:
    """Runs a command line through the platform's command interpreter.

    The child inherits stdin, stdout and stderr, and the call blocks until
    it exits.
    """

    def __init__(self, shell: Optional[str] = None, platform: Optional[str] = None):
        self.platform = platform or sys.platform
        self.shell = shell or default_shell()

    def build_argv(self, command: str) -> List[str]:
        if self.platform == "win32":
            return ["cmd", "/C", command]
        return [self.shell, "-c", command]

    def run(self, command: str) -> int:
        """Execute the command, raising ExecutionError on failure"""
        argv = self.build_argv(command)
        logger.debug("Launching %s", argv)

        try:
            process = subprocess.run(argv, check=False)
        except OSError as e:
            raise ExecutionError(f"could not launch {argv[0]}: {e}", command) from e

        if process.returncode != 0:
            raise ExecutionError(
                f"command exited with status {process.returncode}",
                command,
                process.returncode
            )
        return process.returncode
