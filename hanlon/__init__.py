"""
Hanlon CLI.

- core/: Configuration, logging, exceptions
- cli/: Typer command-line client, option framework, REST client
- schemas/: Pydantic request payloads
- services/: Policy and boot slices
"""
