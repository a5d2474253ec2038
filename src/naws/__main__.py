"""Allow ``python -m naws`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m naws`` behaves identically to the ``naws`` console
script.
"""

from __future__ import annotations

from naws.cli.app import cli

if __name__ == "__main__":
    cli()
