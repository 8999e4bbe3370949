"""MCP tool surface for BoxOfficer."""
