"""
System introspection: what the generated command can rely on
"""

import os
import platform
from pathlib import Path
from typing import List, Optional

from .executor import default_shell
from .models import FewShotExample, SystemMetadata

IGNORED_DIRS = {"node_modules", "vendor", ".git", "dist", "build"}
MAX_FILES = 50


def available_commands(path_env: Optional[str] = None) -> List[str]:
    """Sorted, de-duplicated executables found on PATH"""
    path_env = os.environ.get("PATH", "") if path_env is None else path_env
    commands = set()

    for directory in path_env.split(os.pathsep):
        if not directory:
            continue
        try:
            entries = list(os.scandir(directory))
        except OSError:
            continue  # unreadable or missing

        for entry in entries:
            try:
                if entry.is_file() and os.access(entry.path, os.X_OK):
                    commands.add(entry.name)
            except OSError:
                continue

    return sorted(commands)


def file_context(directory: str = ".", limit: int = MAX_FILES) -> List[str]:
    """Visible files and directories in `directory`, directories end with '/'"""
    files = []
    for entry in sorted(Path(directory).iterdir(), key=lambda p: p.name):
        name = entry.name
        if name.startswith(".") or name in IGNORED_DIRS:
            continue

        files.append(f"{name}/" if entry.is_dir() else name)
        if len(files) >= limit:
            break
    return files


def os_name() -> str:
    return platform.system().lower() or "unknown"


def collect_metadata(
    directory: str = ".",
    previous_error: Optional[str] = None,
    examples: Optional[List[FewShotExample]] = None
) -> SystemMetadata:
    """Snapshot the system for one invocation"""
    try:
        files = file_context(directory)
    except OSError:
        files = []

    return SystemMetadata(
        os=os_name(),
        shell=default_shell(),
        available_commands=tuple(available_commands()),
        current_dir_files=tuple(files),
        previous_error=previous_error,
        few_shot_examples=tuple(examples or ())
    )
