"""Core business logic: roster parsing, name matching, team derivation,
the document codec, submissions, scoring, and the content-store API client.

This module is framework-agnostic. It has no dependency on MCP, FastMCP or
the local database. Everything except ``clients`` is pure and does no I/O.
"""
