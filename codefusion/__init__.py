"""Public package surface for codefusion.

Exports ``main`` for programmatic CLI invocation.
The engine lives in ``codefusion.runtime``; pure pieces sit in sibling modules.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main"]
