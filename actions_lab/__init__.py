"""GitHub Actions learning lab.

A "Hello World" script, the workflows that run it, and the tooling that keeps
those example workflows valid.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.1.0"
