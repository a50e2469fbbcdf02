# =============================================================================
# core/runner.py  —  Execution & Retrieval Unit
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns a validated PackRequest into ONE repomix invocation and hands back
#   either the packed text or a size estimate.
#
# THE FLOW (per request):
#   1. Pick a fresh temp file:  $TMPDIR/repomix-<16 hex>.txt
#   2. Build the argv:          npx repomix [path] [--style ..] ... --output <tmp>
#   3. Run it, capturing stderr whatever the exit status
#   4. Estimate mode → stat the file, report KB / MB / ~tokens
#      Pack mode     → read the file, return it verbatim
#   5. Delete the temp file.  Always.  Even if steps 3 or 4 blew up.
#
# ERROR CONTRACT:
#   run() never raises for filesystem or subprocess trouble.  Every failure
#   comes back as PackResult(is_error=True) with the captured stderr
#   appended, so the host always gets a well-formed answer.
# =============================================================================

import asyncio
import logging
import math
import os
import secrets
import shlex
import signal
import tempfile
from asyncio.subprocess import PIPE
from pathlib import Path
from typing import Sequence

from repomix_mcp.core.config import Settings
from repomix_mcp.core.errors import (
    EstimationError,
    ExecutionError,
    ReadError,
    RepomixError,
)
from repomix_mcp.core.models import PackRequest, PackResult

logger = logging.getLogger(__name__)

# Rough heuristic: ~4 characters of source per LLM token.
BYTES_PER_TOKEN = 4


# -----------------------------------------------------------------------------
# Temp file helpers
# -----------------------------------------------------------------------------
def make_output_path() -> Path:
    """A unique, unguessable output path in the system temp directory."""
    return Path(tempfile.gettempdir()) / f"repomix-{secrets.token_hex(8)}.txt"


def remove_quietly(path: Path) -> None:
    """Delete ``path`` if it exists.  Safe to call any number of times."""
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.debug("Ignoring cleanup failure for %s: %s", path, exc)


# -----------------------------------------------------------------------------
# Command construction
# -----------------------------------------------------------------------------
# The flag order below mirrors repomix's own CLI grammar.  The argv goes
# straight to exec (no shell), so a pattern like "*.md,src/**" arrives as
# one argument with its commas and globs untouched.
# -----------------------------------------------------------------------------
def build_command(base: Sequence[str], request: PackRequest, output_path: Path) -> list[str]:
    """Assemble the full repomix argv for ``request``."""
    argv = list(base)
    if request.path:
        argv.append(request.path)
    if request.style:
        argv.extend(["--style", request.style])
    if request.compress:
        argv.append("--compress")
    if request.include:
        argv.extend(["--include", request.include])
    if request.ignore:
        argv.extend(["--ignore", request.ignore])
    if request.remote:
        argv.extend(["--remote", request.remote])
    argv.extend(["--output", str(output_path)])
    return argv


# -----------------------------------------------------------------------------
# Estimate formatting
# -----------------------------------------------------------------------------
def estimate_tokens(size_bytes: int) -> int:
    return math.ceil(size_bytes / BYTES_PER_TOKEN)


def format_estimate(size_bytes: int, compress: bool) -> str:
    """Render the human-readable size summary returned by ``pack-estimate``."""
    size_kb = size_bytes / 1024
    size_mb = size_bytes / (1024 * 1024)
    return (
        "Repomix output size estimate:\n"
        f"- Size: {size_kb:.2f} KB ({size_mb:.2f} MB)\n"
        f"- Estimated tokens: ~{estimate_tokens(size_bytes):,}\n"
        f"- Compression: {'enabled' if compress else 'disabled'}\n"
        "\n"
        "Use the repomix tool with these same parameters to retrieve the actual content."
    )


def _with_stderr(message: str, stderr: str, label: str) -> str:
    return f"{message}\n{label}: {stderr}" if stderr else message


def _kill_process_group(process: asyncio.subprocess.Process) -> None:
    """Kill repomix and anything it spawned (npx runs the real CLI as a child)."""
    if process.returncode is not None:
        return
    try:
        if hasattr(os, "killpg"):
            os.killpg(process.pid, signal.SIGKILL)
        else:
            process.kill()
    except ProcessLookupError:
        pass


# =============================================================================
# RepomixRunner
# =============================================================================
class RepomixRunner:
    """Runs repomix for one request at a time; holds no per-request state."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def run(self, request: PackRequest, estimate: bool = False) -> PackResult:
        """Execute repomix for ``request`` and return exactly one result.

        Args:
            request: Validated tool arguments.
            estimate: If True, report size/tokens instead of the content.
        """
        output_path = make_output_path()
        argv = build_command(self.settings.command, request, output_path)
        stderr = ""

        try:
            try:
                stderr = await self._execute(argv)
            except ExecutionError as exc:
                stderr = exc.stderr
                if estimate:
                    raise EstimationError(
                        _with_stderr(f"Failed to estimate size: {exc}", stderr, "Repomix stderr")
                    ) from exc
                raise

            if estimate:
                return PackResult(self._estimate(output_path, request, stderr))
            return PackResult(self._retrieve(output_path, stderr))

        except (RepomixError, OSError) as exc:
            logger.warning("repomix request failed: %s", exc)
            return PackResult.error(
                _with_stderr(f"Error executing repomix: {exc}", stderr, "Stderr")
            )
        finally:
            remove_quietly(output_path)

    # -------------------------------------------------------------------------
    # Step 3: the subprocess
    # -------------------------------------------------------------------------
    async def _execute(self, argv: list[str]) -> str:
        """Run ``argv`` in the allowed directory and return its stderr text.

        Raises:
            ExecutionError: On launch failure, timeout, or non-zero exit.
        """
        command_line = shlex.join(argv)
        logger.info("Running: %s", command_line)

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=PIPE,
                stderr=PIPE,
                cwd=str(self.settings.allowed_directory),
                start_new_session=True,
            )
        except (OSError, ValueError) as exc:
            raise ExecutionError(f"Failed to start {argv[0]}: {exc}") from exc

        try:
            _, raw_stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.settings.timeout
            )
        except asyncio.TimeoutError:
            _kill_process_group(process)
            await process.wait()
            raise ExecutionError(
                f"Command timed out after {self.settings.timeout:g} seconds: {command_line}"
            ) from None

        stderr = raw_stderr.decode("utf-8", errors="replace").strip()
        if process.returncode != 0:
            raise ExecutionError(
                f"Command failed with exit code {process.returncode}: {command_line}",
                stderr=stderr,
            )
        return stderr

    # -------------------------------------------------------------------------
    # Step 4a: estimate mode
    # -------------------------------------------------------------------------
    def _estimate(self, output_path: Path, request: PackRequest, stderr: str) -> str:
        try:
            size_bytes = output_path.stat().st_size
            summary = format_estimate(size_bytes, bool(request.compress))
        except OSError as exc:
            remove_quietly(output_path)
            raise EstimationError(
                _with_stderr(f"Failed to estimate size: {exc}", stderr, "Repomix stderr")
            ) from exc

        remove_quietly(output_path)
        logger.info("Estimated %d bytes (~%d tokens)", size_bytes, estimate_tokens(size_bytes))
        return summary

    # -------------------------------------------------------------------------
    # Step 4b: pack mode
    # -------------------------------------------------------------------------
    def _retrieve(self, output_path: Path, stderr: str) -> str:
        limit = self.settings.max_output_bytes
        try:
            if limit is not None:
                size_bytes = output_path.stat().st_size
                if size_bytes > limit:
                    raise ReadError(
                        f"Output is {size_bytes:,} bytes, over the {limit:,}-byte limit. "
                        "Narrow it with the include/ignore parameters or enable compress."
                    )
            content = output_path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise ReadError(
                _with_stderr(f"Failed to read output file: {exc}", stderr, "Repomix stderr")
            ) from exc

        remove_quietly(output_path)
        return content
