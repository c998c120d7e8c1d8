"""MCP server exposing the patient store."""
