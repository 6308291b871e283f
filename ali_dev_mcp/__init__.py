"""
ALI Dev MCP Server - Azure DevOps test case, automation and pull request tools
"""

__version__ = "1.0.0"
