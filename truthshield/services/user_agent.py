"""User-Agent parsing for threat device information."""

from __future__ import annotations

import re
from typing import Dict, Optional

_BROWSERS = (
    ("Edge", re.compile(r"Edg(e|A|iOS)?/")),
    ("Chrome", re.compile(r"Chrome/|CriOS/")),
    ("Firefox", re.compile(r"Firefox/|FxiOS/")),
    ("Safari", re.compile(r"Safari/")),
)

_PLATFORMS = (
    ("Windows", re.compile(r"Windows")),
    ("Android", re.compile(r"Android")),
    ("iOS", re.compile(r"iPhone|iPad")),
    ("Mac", re.compile(r"Macintosh")),
    ("Linux", re.compile(r"Linux")),
)

_MOBILE = re.compile(r"Mobile|Android|iPhone", re.IGNORECASE)


def parse_user_agent(user_agent: Optional[str]) -> Dict[str, object]:
    """Browser, platform and mobile flag for a User-Agent header."""
    user_agent = user_agent or ""
    browser = next((name for name, pattern in _BROWSERS if pattern.search(user_agent)), "Unknown")
    platform = next((name for name, pattern in _PLATFORMS if pattern.search(user_agent)), "Unknown")
    return {
        "user_agent": user_agent,
        "browser": browser,
        "platform": platform,
        "is_mobile": bool(_MOBILE.search(user_agent)),
    }
