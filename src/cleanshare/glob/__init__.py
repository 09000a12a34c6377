"""Glob Compiler module.

Exports the compiled matcher types and the ``compile_glob`` /
``compile_globs`` functions.
"""
from __future__ import annotations

from cleanshare.glob.compiler import GlobPattern, GlobSet, compile_glob, compile_globs

__all__ = ["GlobPattern", "GlobSet", "compile_glob", "compile_globs"]
