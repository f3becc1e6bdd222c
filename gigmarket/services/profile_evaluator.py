"""Lightweight profile URL evaluator (LinkedIn / GitHub / portfolio links)."""

from typing import Dict
from urllib.parse import urlparse


def evaluate_profile_url(profile_url: str) -> Dict:
    """
    Score a profile URL between 0 and 100 using cheap, offline heuristics.

    Returns:
        Dict with `score` and a list of `diagnostics`
    """
    score = 0
    diagnostics = []

    if not profile_url or not isinstance(profile_url, str):
        diagnostics.append("No URL")
        return {"score": 0, "diagnostics": diagnostics}

    try:
        parsed = urlparse(profile_url.strip())
        hostname = (parsed.hostname or "").lower()
    except ValueError:
        hostname = ""
        parsed = None

    if not parsed or not parsed.scheme or not hostname:
        diagnostics.append("Invalid URL")
        return {"score": 0, "diagnostics": diagnostics}

    if "linkedin.com" in hostname:
        score += 40
        diagnostics.append("LinkedIn URL")

    if "github.com" in hostname:
        score += 25
        diagnostics.append("GitHub URL")

    if "behance.net" in hostname or "dribbble.com" in hostname or "portfolio" in hostname:
        score += 30
        diagnostics.append("Creative portfolio")

    # Longer path suggests profile completeness
    if len(parsed.path or "/") > 10:
        score += 10
        diagnostics.append("Detailed path")

    if parsed.query or parsed.fragment:
        score += 5
        diagnostics.append("Has activity params")

    return {"score": min(score, 100), "diagnostics": diagnostics}
