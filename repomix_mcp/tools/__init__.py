# =============================================================================
# tools/__init__.py
# =============================================================================
# FastMCP wrappers around core/.
#
# This layer only:
#   1. declares the tool names, parameters and descriptions the host sees
#   2. logs each call to stderr
#   3. turns a core PackResult into a FastMCP return value or ToolError
#
# It contains no path checks, no command building and no file handling;
# those all live in core/.
# =============================================================================
