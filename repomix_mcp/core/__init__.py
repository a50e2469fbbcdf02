# =============================================================================
# core/__init__.py
# =============================================================================
# All request-handling logic for the repomix MCP server.
#
# Nothing in this package imports FastMCP.  A call can be driven end to end
# from a plain asyncio program:
#
#     settings = load_settings()
#     result = await Dispatcher(settings).dispatch("pack-estimate", {"path": "."})
#
# tools/ is the only layer that knows about the MCP protocol.
# =============================================================================

from repomix_mcp.core.access import is_path_allowed
from repomix_mcp.core.config import Settings, load_settings
from repomix_mcp.core.dispatcher import Dispatcher
from repomix_mcp.core.errors import (
    EstimationError,
    ExecutionError,
    InvalidArgumentsError,
    ReadError,
    RepomixError,
    UnknownOperationError,
)
from repomix_mcp.core.models import Operation, PackRequest, PackResult
from repomix_mcp.core.runner import RepomixRunner

__all__ = [
    "Dispatcher",
    "EstimationError",
    "ExecutionError",
    "InvalidArgumentsError",
    "Operation",
    "PackRequest",
    "PackResult",
    "ReadError",
    "RepomixError",
    "RepomixRunner",
    "Settings",
    "UnknownOperationError",
    "is_path_allowed",
    "load_settings",
]
