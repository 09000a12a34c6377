"""Built-in baseline rules.

The baseline covers the common click identifiers and campaign-tracking
conventions, plus the redirect wrappers of a few large sites.  User rule
files are merged on top of it with ``RuleSet.merge``.
"""
from __future__ import annotations

from typing import Final

from cleanshare.rules.model import HostRule, RuleSet

# Click identifiers and mailing-list trackers
BUILTIN_REMOVE_PARAMS: Final[tuple[str, ...]] = (
    "gclid",
    "gbraid",
    "wbraid",
    "fbclid",
    "igshid",
    "twclid",
    "mc_eid",
    "msclkid",
    "dclid",
    "icid",
    "mkt_tok",
    "vero_id",
    "vero_conv",
    "spm",
    "ncid",
    "epik",
    "si",
)

BUILTIN_REMOVE_PARAM_GLOBS: Final[tuple[str, ...]] = (
    "utm_*",
    "pk_*",  # Matomo / Piwik campaigns
    "mtm_*",
    "oly_*",
    "s_cid*",
    "aff*",
    "ref*",
)

BUILTIN_HOST_RULES: Final[tuple[HostRule, ...]] = (
    # Search result redirector: /url?q=...
    HostRule(hosts=("*.google.com",), unwrap_params=("url", "q", "u")),
    # Outbound link shim: l.facebook.com/l.php?u=...
    HostRule(hosts=("*.facebook.com", "*.lm.facebook.com"), unwrap_params=("u",)),
    HostRule(hosts=("out.reddit.com",), unwrap_params=("url",)),
    # Description links: youtube.com/redirect?q=...
    HostRule(hosts=("*.youtube.com", "youtu.be"), unwrap_params=("q",)),
)

BUILTIN_RULES: Final[RuleSet] = RuleSet(
    remove_params=BUILTIN_REMOVE_PARAMS,
    remove_param_globs=BUILTIN_REMOVE_PARAM_GLOBS,
    host_rules=BUILTIN_HOST_RULES,
)
