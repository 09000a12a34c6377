"""CLI package.

The ``cli`` sub-package contains the Click application and all command
implementations.  Commands build their own ``UrlSanitizer`` from the
command-line options; nothing here holds process-wide state beyond the
rich consoles.
"""
from __future__ import annotations
