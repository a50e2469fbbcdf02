# =============================================================================
# main.py  —  Entry Point for the Repomix MCP Server
# =============================================================================
#
# HOW TO RUN:
#   cd /path/to/your/project
#   uv run python /path/to/repomix-mcp/main.py
#
# WHAT HAPPENS:
#   1. Settings are read from the environment (and a .env file, if present)
#   2. The launch directory becomes the only directory the tools may pack
#   3. A FastMCP server starts on stdio, advertising "pack" and
#      "pack-estimate"
#   4. Each call runs `npx repomix ... --output <tmpfile>`, reads the result,
#      and deletes the temp file before answering
#
# HOST CONFIGURATION (e.g. an MCP client's server list):
#   {
#     "command": "uv",
#     "args": ["run", "python", "/path/to/repomix-mcp/main.py"]
#   }
# =============================================================================

from repomix_mcp.tools.mcp_server import main


if __name__ == "__main__":
    main()
