"""pkgplan: Minimal-cost install plans for versioned package repositories."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
