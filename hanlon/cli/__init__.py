"""
CLI Client Module.

Command-line client built with Typer for driving the provisioning engine's
REST API.

Architecture:
- CLI is a thin presentation layer over the engine
- Slice commands are routed and parsed by the declarative option framework
- Engine calls go through httpx (APIClient)
- Output is rendered with Rich (RichPresenter)

Usage:
    hanlon --help
    hanlon policy
    hanlon policy add -p linux_deploy -l web -m MODEL_UUID -t memsize_1GiB
"""
