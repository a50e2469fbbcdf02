# =============================================================================
# core/dispatcher.py  —  Request Dispatcher
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   The single entry point for a tool call, independent of any MCP library:
#
#     dispatch("pack-estimate", {"path": ".", "include": "*.py"})
#        │
#        ├─ unknown name?          → raise UnknownOperationError
#        ├─ bad arguments?         → raise InvalidArgumentsError
#        ├─ local path outside cwd → return PackResult(is_error=True)
#        └─ otherwise              → RepomixRunner.run(request, estimate=...)
#
#   The two raised errors are contract violations by the caller.  Everything
#   else (including "access denied") comes back as a PackResult.
# =============================================================================

import logging
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from repomix_mcp.core.access import is_path_allowed
from repomix_mcp.core.config import Settings
from repomix_mcp.core.errors import InvalidArgumentsError, UnknownOperationError
from repomix_mcp.core.models import Operation, PackRequest, PackResult
from repomix_mcp.core.runner import RepomixRunner

logger = logging.getLogger(__name__)


def resolve_operation(name: str) -> Operation:
    try:
        return Operation(name)
    except ValueError:
        raise UnknownOperationError(name) from None


def parse_request(arguments: Optional[Mapping[str, Any]]) -> PackRequest:
    """Validate raw tool arguments.  ``None`` is treated as no arguments."""
    try:
        return PackRequest.model_validate(dict(arguments or {}))
    except ValidationError as exc:
        raise InvalidArgumentsError(str(exc)) from exc


def access_denied_message(path: str, allowed_directory) -> str:
    return f'Access denied: Path "{path}" is outside the allowed directory ({allowed_directory})'


class Dispatcher:
    """Routes ``pack`` / ``pack-estimate`` calls to the runner."""

    def __init__(self, settings: Settings, runner: Optional[RepomixRunner] = None):
        self.settings = settings
        self.runner = runner or RepomixRunner(settings)

    async def dispatch(
        self,
        name: Union[str, Operation],
        arguments: Union[Mapping[str, Any], PackRequest, None] = None,
    ) -> PackResult:
        """Handle one tool call.

        Raises:
            UnknownOperationError: ``name`` is not a known tool.
            InvalidArgumentsError: ``arguments`` don't match the schema.
        """
        operation = resolve_operation(name)
        request = arguments if isinstance(arguments, PackRequest) else parse_request(arguments)

        if request.needs_access_check and not is_path_allowed(
            request.path, self.settings.allowed_directory
        ):
            logger.warning("Refusing path outside %s: %s", self.settings.allowed_directory, request.path)
            return PackResult.error(
                access_denied_message(request.path, self.settings.allowed_directory)
            )

        return await self.runner.run(request, estimate=operation.is_estimate)
