"""Explicit hand-off to the installed issue-tracker sync script.

The installer itself never talks to the tracker. ``squadkit sync`` checks
that the script's tools are on PATH and runs it from the project root.
"""

import asyncio
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from squadkit.errors import SyncFailed, TargetNotInitialized, ToolUnavailable
from squadkit.installer.installation import SYNC_SCRIPT
from squadkit.paths import TargetLayout

SYNC_TIMEOUT = 300

_logging = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tool:
    name: str
    install_hint: str

    def is_available(self) -> bool:
        return shutil.which(self.name) is not None


SYNC_TOOLS = (
    Tool("bash", "install bash from your system package manager"),
    Tool("jq", "brew install jq (macOS) or apt install jq (Linux)"),
    Tool("curl", "brew install curl (macOS) or apt install curl (Linux)"),
)


def require_tools(tools=SYNC_TOOLS) -> None:
    """Raise ToolUnavailable for the first tool missing from PATH."""
    for tool in tools:
        if not tool.is_available():
            raise ToolUnavailable(tool.name, tool.install_hint)


async def run_command_async(
    args: list[str], cwd: Path, timeout: int = SYNC_TIMEOUT
) -> tuple[str, int]:
    """Run ``args`` in ``cwd`` and return combined output and return code."""
    _logging.debug(f"Running command: {' '.join(args)} (cwd={cwd})")
    process = await asyncio.create_subprocess_exec(
        *args,
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
    )
    try:
        stdout, _ = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        _logging.error(f"Command timed out after {timeout} seconds: {args}")
        return f"Command timed out after {timeout} seconds", 1
    output = stdout.decode(errors="replace").strip()
    return output, process.returncode if process.returncode is not None else 1


def run_sync(layout: TargetLayout, timeout: int = SYNC_TIMEOUT) -> str:
    """Run the installed sync script for the project owning ``layout``.

    Raises:
        TargetNotInitialized: If the target has no config yet.
        ToolUnavailable: If bash, jq or curl is missing.
        SyncFailed: If the script is missing or exits non-zero.
    """
    if not layout.is_initialized():
        raise TargetNotInitialized(layout.config_file)
    require_tools()

    script = layout.scripts_dir / SYNC_SCRIPT
    if not script.is_file():
        raise SyncFailed(f"{script} not found; run 'squadkit update' to restore it")

    project = layout.root.parent
    output, returncode = asyncio.run(
        run_command_async(["bash", str(script.relative_to(project))], project, timeout)
    )
    if returncode != 0:
        raise SyncFailed(f"sync script exited with status {returncode}: {output}")
    return output


__all__ = [
    "SYNC_TIMEOUT",
    "SYNC_TOOLS",
    "Tool",
    "require_tools",
    "run_command_async",
    "run_sync",
]
