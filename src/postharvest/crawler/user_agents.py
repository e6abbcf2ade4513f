"""
User Agent Rotation with Realistic Browser Fingerprints

Provides a pool of realistic browser header sets. Every call assembles a fresh
combination (user agent, language preference, client hints) so consecutive
fetches never repeat one verbatim fingerprint.
"""

from __future__ import annotations

import random
from typing import Dict, List, Optional, Tuple

# (user agent, sec-ch-ua brand list or None for browsers without client hints, platform)
_DesktopAgent = Tuple[str, Optional[str], str]


class UserAgentRotator:
    """
    Manages rotation of realistic browser header sets.

    Features:
    - Realistic browser fingerprints
    - Weighted selection between desktop and mobile
    - Randomized Accept-Language and client hints per call
    """

    def __init__(self, include_mobile: bool = False, rng: Optional[random.Random] = None):
        self.include_mobile = include_mobile
        self._rng = rng or random.Random()

        # Desktop browsers (most common first)
        self.desktop_agents: List[_DesktopAgent] = [
            # Chrome (most popular)
            (
                "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36",
                '"Not/A)Brand";v="8", "Chromium";v="126", "Google Chrome";v="126"',
                '"Windows"',
            ),
            (
                "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36",
                '"Google Chrome";v="125", "Chromium";v="125", "Not.A/Brand";v="24"',
                '"macOS"',
            ),
            (
                "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36",
                '"Not/A)Brand";v="8", "Chromium";v="126", "Google Chrome";v="126"',
                '"Linux"',
            ),
            # Firefox
            ("Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:127.0) Gecko/20100101 Firefox/127.0", None, '"Windows"'),
            ("Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:127.0) Gecko/20100101 Firefox/127.0", None, '"macOS"'),
            # Safari
            (
                "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.5 Safari/605.1.15",
                None,
                '"macOS"',
            ),
            # Edge
            (
                "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36 Edg/126.0.0.0",
                '"Not/A)Brand";v="8", "Chromium";v="126", "Microsoft Edge";v="126"',
                '"Windows"',
            ),
        ]

        # Mobile browsers
        self.mobile_agents: List[_DesktopAgent] = [
            (
                "Mozilla/5.0 (iPhone; CPU iPhone OS 17_5 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.5 Mobile/15E148 Safari/604.1",
                None,
                '"iOS"',
            ),
            (
                "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126.0.0.0 Mobile Safari/537.36",
                '"Not/A)Brand";v="8", "Chromium";v="126", "Google Chrome";v="126"',
                '"Android"',
            ),
        ]

        self.accept_languages = [
            "en-US,en;q=0.9",
            "en-US,en;q=0.8",
            "en-GB,en;q=0.9,en-US;q=0.8",
            "en-US,en;q=0.9,de;q=0.6",
            "en-US,en;q=0.9,fr;q=0.7",
        ]

        self.category_weights = {
            "desktop": 0.8 if include_mobile else 1.0,
            "mobile": 0.2 if include_mobile else 0.0,
        }

    def _pick_agent(self) -> Tuple[_DesktopAgent, bool]:
        categories = list(self.category_weights.keys())
        weights = list(self.category_weights.values())
        category = self._rng.choices(categories, weights=weights)[0]
        if category == "mobile" and self.mobile_agents:
            return self._rng.choice(self.mobile_agents), True
        return self._rng.choice(self.desktop_agents), False

    def get_random_user_agent(self) -> str:
        """Get a random user agent based on weighted selection."""
        (user_agent, _, _), _ = self._pick_agent()
        return user_agent

    def browser_headers(self, referer: Optional[str] = None) -> Dict[str, str]:
        """Assemble a fresh, browser-like header set for a page request."""
        (user_agent, brands, platform), mobile = self._pick_agent()
        headers = {
            "User-Agent": user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
            "Accept-Language": self._rng.choice(self.accept_languages),
            "Upgrade-Insecure-Requests": "1",
            "Sec-Fetch-Dest": "document",
            "Sec-Fetch-Mode": "navigate",
            "Sec-Fetch-Site": "none" if referer is None else "same-origin",
            "Sec-Fetch-User": "?1",
        }
        if brands:
            headers["Sec-CH-UA"] = brands
            headers["Sec-CH-UA-Mobile"] = "?1" if mobile else "?0"
            headers["Sec-CH-UA-Platform"] = platform
        if self._rng.random() < 0.5:
            headers["Cache-Control"] = "max-age=0"
        if self._rng.random() < 0.3:
            headers["DNT"] = "1"
        if referer:
            headers["Referer"] = referer
        return headers

    def media_headers(self, referer: str) -> Dict[str, str]:
        """Header set for fetching a media asset on behalf of a browser client."""
        return {
            "User-Agent": self.get_random_user_agent(),
            "Accept": "image/avif,image/webp,video/*,application/pdf,*/*;q=0.8",
            "Accept-Language": self._rng.choice(self.accept_languages),
            "Referer": referer,
            "Sec-Fetch-Dest": "empty",
            "Sec-Fetch-Mode": "no-cors",
            "Sec-Fetch-Site": "cross-site",
        }

    def get_stats(self) -> Dict[str, int]:
        """Get statistics about available user agents."""
        return {
            "desktop_agents": len(self.desktop_agents),
            "mobile_agents": len(self.mobile_agents),
            "include_mobile": int(self.include_mobile),
        }
