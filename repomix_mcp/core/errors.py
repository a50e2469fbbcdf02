# =============================================================================
# core/errors.py  —  Error Taxonomy
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Names every way a pack request can fail.  There are two families:
#
#   PROTOCOL-LEVEL (raised all the way out to the caller):
#     - InvalidArgumentsError  → arguments don't match the schema
#     - UnknownOperationError  → the tool name isn't "pack" / "pack-estimate"
#
#   CONTENT-LEVEL (caught inside the runner and turned into an error result):
#     - ExecutionError   → repomix exited non-zero, couldn't start, timed out
#     - EstimationError  → the size estimate couldn't be computed
#     - ReadError        → the output file couldn't be read back
#
#   "Access denied" is deliberately NOT here: a path outside the allowed
#   directory is an expected outcome and comes back as a normal PackResult.
# =============================================================================


class RepomixError(Exception):
    """Base class for everything this package raises."""


class InvalidArgumentsError(RepomixError, ValueError):
    """Tool arguments failed schema validation."""


class UnknownOperationError(RepomixError, LookupError):
    """A call named an operation other than ``pack`` or ``pack-estimate``."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ExecutionError(RepomixError):
    """The repomix process failed to start, exited non-zero, or timed out."""

    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message)
        self.stderr = stderr


class EstimationError(RepomixError):
    """Stat or size computation failed after repomix ran."""


class ReadError(RepomixError):
    """The generated output could not be read back (or was too large)."""
