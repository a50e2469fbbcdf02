# =============================================================================
# core/models.py  —  Data Models (the "nouns" of the system)
# =============================================================================
#
# Everything that flows through one pack request:
#
#   PackRequest  →  the validated tool arguments
#   Operation    →  which of the two tools was called
#   PackResult   →  the single text block (or error) sent back to the host
#
# None of these outlive a request.  The only long-lived value in the whole
# process is the allowed directory, and that lives in Settings (config.py).
# =============================================================================

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, StrictBool


# The three output formats repomix understands.
Style = Literal["xml", "markdown", "plain"]


# -----------------------------------------------------------------------------
# Operation — the two advertised tools
# -----------------------------------------------------------------------------
class Operation(str, Enum):
    """Tool names, mapped to retrieve vs. estimate mode."""

    PACK = "pack"
    PACK_ESTIMATE = "pack-estimate"

    @property
    def is_estimate(self) -> bool:
        return self is Operation.PACK_ESTIMATE


# -----------------------------------------------------------------------------
# PackRequest — the parameter surface shared by both tools
# -----------------------------------------------------------------------------
# Every field is optional.  A bare request packs the allowed directory itself
# with repomix's defaults.  Unknown keys are dropped rather than rejected.
# -----------------------------------------------------------------------------
class PackRequest(BaseModel):
    """Validated arguments for a single ``pack`` / ``pack-estimate`` call."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    path: Optional[str] = None         # Directory to pack (local only)
    style: Optional[Style] = None      # --style
    compress: Optional[StrictBool] = None  # --compress (flag only when True)
    include: Optional[str] = None      # --include "*.md,*.py"
    ignore: Optional[str] = None       # --ignore "dist/**,*test*"
    remote: Optional[str] = None       # --remote https://github.com/o/r

    @property
    def needs_access_check(self) -> bool:
        """Local paths are confined; remote fetches are not."""
        return bool(self.path) and not self.remote


# -----------------------------------------------------------------------------
# PackResult — exactly one of these per request
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class PackResult:
    """The text returned to the host, plus whether it is an error."""

    text: str
    is_error: bool = False

    @classmethod
    def error(cls, text: str) -> "PackResult":
        return cls(text=text, is_error=True)
