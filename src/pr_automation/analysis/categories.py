"""
Ordered table of file category patterns.

Both the presence check used for PR titles and the bucketing used for PR
descriptions read this table, so the two can never disagree. Order matters:
when bucketing, the first matching pattern wins.
"""

from __future__ import annotations

import re
from typing import List, Pattern, Tuple

FRONTEND = "Frontend"
BACKEND = "Backend"
TESTS = "Tests"
DOCUMENTATION = "Documentation"
CONFIGURATION = "Configuration"
SCRIPTS = "Scripts"
OTHER = "Other"

CATEGORY_PATTERNS: List[Tuple[str, Pattern[str]]] = [
    (FRONTEND, re.compile(r"\.(js|jsx|ts|tsx|vue|svelte|html|css|scss|sass)$", re.IGNORECASE)),
    (BACKEND, re.compile(r"\.(py|java|go|rb|php|cs|cpp|c)$", re.IGNORECASE)),
    # Not anchored: matches "app.test.js" as well as "app.spec.ts".
    (TESTS, re.compile(r"\.(test|spec)\.", re.IGNORECASE)),
    (DOCUMENTATION, re.compile(r"\.(md|txt|rst)$", re.IGNORECASE)),
    (CONFIGURATION, re.compile(r"\.(json|yaml|yml|toml|ini|conf)$", re.IGNORECASE)),
    (SCRIPTS, re.compile(r"\.(sh|ps1|bat)$", re.IGNORECASE)),
]

ALL_CATEGORIES: Tuple[str, ...] = tuple(name for name, _ in CATEGORY_PATTERNS) + (OTHER,)
