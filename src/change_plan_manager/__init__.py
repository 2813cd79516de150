"""Change Plan Manager - dependency-aware change plans for AI assistants.

This package stores named change plans made of ordered, prioritized steps and
exposes them through an MCP (Model Context Protocol) server.

Key components:
- domain: plan/step models, dependency validation, next-step selection
- services: the plan store, its YAML persistence and the mutation controller
- tools: the MCP tool surface
"""

__version__ = "0.1.0"
