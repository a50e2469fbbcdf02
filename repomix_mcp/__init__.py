# =============================================================================
# repomix_mcp/__init__.py
# =============================================================================
# An MCP server that exposes the repomix CLI as two tools:
#   - pack           → pack a repository into one AI-friendly text file
#   - pack-estimate  → report how big that file would be, without the content
#
# LAYOUT:
#   core/   pure request handling (no MCP imports): access guard, dispatcher,
#           subprocess runner, settings, models, errors
#   tools/  the FastMCP wrapper that publishes core/ over stdio
# =============================================================================

__version__ = "1.0.0"
