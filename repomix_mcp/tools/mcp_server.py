# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Publishes the two repomix tools over MCP.  Each tool is a thin wrapper
#   around the core Dispatcher: it logs the call, hands the arguments over,
#   and converts the PackResult into what FastMCP expects.
#
# THE TWO TOOLS (identical parameters):
#   - pack            → the full packed repository text
#   - pack-estimate   → size / token estimate only, never the content
#
# ERROR RESULTS:
#   A PackResult with is_error=True is raised as ToolError.  FastMCP turns
#   that into a CallToolResult with isError=true and the message as its one
#   text block, which is exactly the shape the host expects.
#
# RUNNING THIS SERVER:
#   a) uv run python main.py
#   b) repomix-mcp            (console script)
#   Either way the directory you launch from is the only local directory
#   the tools may pack.
# =============================================================================

import logging
import sys
from typing import Annotated, Any, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field, StrictBool

from repomix_mcp.core.config import Settings, load_settings
from repomix_mcp.core.dispatcher import Dispatcher
from repomix_mcp.core.models import Operation, PackResult, Style

SERVER_NAME = "repomix-mcp-server"

# =============================================================================
# Logging Setup
# =============================================================================
# STDOUT is the MCP transport, so every log line goes to STDERR.
#
#   CYAN   → incoming tool call + parameters
#   YELLOW → status messages
#   GREEN  → response summary (size + error flag, never the packed text)
# =============================================================================
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _log_request(tool_name: str, **params: Any) -> None:
    """Log an incoming tool call with its non-empty parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items() if v is not None)
    logging.info(f"{_CYAN}{tool_name} called with: {param_str or '(no arguments)'}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: PackResult) -> PackResult:
    """Log a one-line summary of the result in GREEN, then return it."""
    outcome = "error" if result.is_error else "ok"
    logging.info(f"{_GREEN}  ← {tool_name} response: {outcome}, {len(result.text):,} chars{_RESET}")
    return result


# =============================================================================
# Tool descriptions
# =============================================================================
# The host's LLM reads these to decide when and how to call each tool.
# =============================================================================
PACK_DESCRIPTION = (
    "Pack repository files into a single AI-friendly file. Use at session start "
    "to load context efficiently. IMPORTANT: Always use the \"include\" parameter "
    "to filter only relevant files (e.g., \"*.md,*.ts,*.js\" for a TypeScript "
    "project, or \"*.md,*.py\" for Python). Start with root-level *.md files and "
    "source files in the language being worked on. Always use pack-estimate "
    "first to check size."
)

PACK_ESTIMATE_DESCRIPTION = (
    "Estimate repomix output size before retrieval. ALWAYS use this first with "
    "the \"include\" parameter to filter only relevant files (e.g., "
    "\"*.md,*.ts,*.js\" for TypeScript, \"*.md,*.py\" for Python). If estimated "
    "tokens are reasonable (<50K), proceed with pack using the same filters."
)

PathArg = Annotated[Optional[str], Field(description="Path to the directory to pack")]
StyleArg = Annotated[Optional[Style], Field(description="Output format style")]
CompressArg = Annotated[
    Optional[StrictBool], Field(description="Compress output to reduce token count")
]
IncludeArg = Annotated[
    Optional[str],
    Field(
        description=(
            "Files to include (glob pattern). Examples: \"*.md,*.ts,*.js\" for "
            "TypeScript projects, \"*.md,*.py\" for Python, \"*.md,*.go\" for Go. "
            "Always specify to avoid large outputs!"
        )
    ),
]
IgnoreArg = Annotated[
    Optional[str],
    Field(
        description=(
            "Files to exclude (glob pattern). Use to filter out test files, build "
            "outputs, etc. Example: \"*test*,*spec*,dist/**,build/**\""
        )
    ),
]
RemoteArg = Annotated[Optional[str], Field(description="Remote repository URL to process")]


# =============================================================================
# Server factory
# =============================================================================
def create_server(settings: Settings) -> FastMCP:
    """Build a FastMCP server whose tools are confined to ``settings``."""
    mcp = FastMCP(SERVER_NAME)
    dispatcher = Dispatcher(settings)

    async def _call(operation: Operation, **params: Any) -> str:
        _log_request(operation.value, **params)
        result = _log_response(operation.value, await dispatcher.dispatch(operation, params))
        if result.is_error:
            raise ToolError(result.text)
        return result.text

    @mcp.tool(name=Operation.PACK.value, description=PACK_DESCRIPTION)
    async def pack(
        path: PathArg = None,
        style: StyleArg = None,
        compress: CompressArg = None,
        include: IncludeArg = None,
        ignore: IgnoreArg = None,
        remote: RemoteArg = None,
    ) -> str:
        """Pack the repository and return the full repomix output.

        WHEN TO CALL THIS: After pack-estimate reports a manageable size.
        Pass the same filters you estimated with.

        Args:
            path: Directory to pack, inside the launch directory.
            style: "xml", "markdown" or "plain".
            compress: Strip bodies down to signatures to save tokens.
            include: Comma-separated globs to keep, e.g. "*.md,*.py".
            ignore: Comma-separated globs to drop, e.g. "dist/**,*test*".
            remote: Repository URL (or owner/repo) to fetch instead of a
                local path.  Local path confinement does not apply.

        Returns:
            The packed text exactly as repomix wrote it.
        """
        return await _call(
            Operation.PACK,
            path=path, style=style, compress=compress,
            include=include, ignore=ignore, remote=remote,
        )

    @mcp.tool(name=Operation.PACK_ESTIMATE.value, description=PACK_ESTIMATE_DESCRIPTION)
    async def pack_estimate(
        path: PathArg = None,
        style: StyleArg = None,
        compress: CompressArg = None,
        include: IncludeArg = None,
        ignore: IgnoreArg = None,
        remote: RemoteArg = None,
    ) -> str:
        """Report how large the pack output would be, without returning it.

        WHEN TO CALL THIS: Before pack, to check that the chosen filters
        keep the output within budget.  Takes the same arguments as pack.

        Returns:
            A short summary: size in KB / MB, ~token count (bytes / 4),
            and whether compression was requested.
        """
        return await _call(
            Operation.PACK_ESTIMATE,
            path=path, style=style, compress=compress,
            include=include, ignore=ignore, remote=remote,
        )

    return mcp


# =============================================================================
# Server entry point
# =============================================================================
def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    _log_status(f"Restricting access to directory: {settings.allowed_directory}")
    _log_status(f"repomix command: {' '.join(settings.command)}")
    create_server(settings).run()


if __name__ == "__main__":
    main()
