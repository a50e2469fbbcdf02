# =============================================================================
# core/access.py  —  Access Guard
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Answers one question: may repomix be pointed at this local path?
#
#   Both the candidate and the allowed directory are resolved to real paths
#   (symlinks followed) before comparing, so a link inside the project that
#   points at /etc is still refused.
#
# FAIL CLOSED:
#   Any path that can't be resolved (missing, unreadable, symlink loop,
#   embedded NUL...) is refused.  This function never raises.
# =============================================================================

import logging
import os
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def is_path_allowed(candidate: PathLike, allowed_directory: PathLike) -> bool:
    """Return True if ``candidate`` resolves to a location inside the boundary.

    Relative candidates are interpreted relative to ``allowed_directory``.
    """
    try:
        boundary = Path(allowed_directory).resolve(strict=True)
        target = (boundary / candidate).resolve(strict=True)
        relative = os.path.relpath(target, boundary)
    except (OSError, RuntimeError, ValueError) as exc:
        logger.debug("Cannot resolve %r: %s", candidate, exc)
        return False

    if os.path.isabs(relative):
        return False
    first = Path(relative).parts[0] if relative != os.curdir else os.curdir
    return first != os.pardir
