"""
Profile Inspector - Remote Profile Signals

Fetches a candidate's public profile (GitHub API, LinkedIn or any portfolio
page) and turns what it finds into an extra score between 0 and 60 that the
inspection queue adds to the application's evaluation score.

Network failures never raise: they come back as an unsuccessful
InspectionResult with a reason.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, List, Optional
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from gigmarket.config import settings
from gigmarket.utils.helpers import utc_now

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"
USER_AGENT = "GigMarketProfileInspector/1.0"
MAX_EXTRA_SCORE = 60

PROJECT_KEYWORDS = ["project", "case study", "portfolio", "work", "projects", "works"]
TOOLS = [
    "figma", "adobe", "photoshop", "illustrator", "framer", "webflow", "sketch",
    "react", "node", "python", "django", "flask", "docker",
]
PROJECT_LINK_PATTERN = re.compile(r"github\.com|behance\.net|dribbble\.com|portfolio|figma\.com|webflow\.io|codepen\.io")
LINKEDIN_BLOCKED_PATTERN = re.compile(
    r"sign in to linkedin|login required|linkedin\.com/checkpoint/verify|authwall", re.IGNORECASE
)


@dataclass
class InspectionResult:
    success: bool
    extra_score: int = 0
    details: Dict = field(default_factory=dict)
    reason: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "success": self.success,
            "extra_score": self.extra_score,
            "details": self.details,
            "reason": self.reason,
        }


def detect_platform(profile_url: str) -> str:
    try:
        hostname = (urlparse(profile_url).hostname or "").lower()
    except ValueError:
        return "unknown"
    if not hostname:
        return "unknown"
    if "github.com" in hostname:
        return "github"
    if "linkedin.com" in hostname:
        return "linkedin"
    if any(h in hostname for h in ("behance.net", "dribbble.com", "portfolio", "figma.com", "webflow.io")):
        return "portfolio"
    return "website"


def parse_html(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup or "", "html.parser")


def html_to_text(markup: str) -> str:
    """Visible text of an HTML page, lower-cased and whitespace-collapsed."""
    soup = parse_html(markup)
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return " ".join(soup.get_text(" ").split()).lower()


def html_title(markup: str) -> str:
    soup = parse_html(markup)
    if soup.title is None:
        return ""
    return soup.title.get_text().strip().lower()


def html_links(markup: str) -> List[str]:
    return [a["href"] for a in parse_html(markup).find_all("a", href=True)]


def _recent_years(span: int = 5) -> List[int]:
    year = utc_now().year
    return [year - i for i in range(span + 1)]


class ProfileInspector:
    """Inspect remote profiles with httpx."""

    def __init__(self, client: Optional[httpx.Client] = None, enabled: Optional[bool] = None):
        self.enabled = settings.ENABLE_REMOTE_PROFILE_INSPECTION if enabled is None else enabled
        self.timeout = settings.INSPECTION_TIMEOUT_SECONDS
        self._client = client

    def _http(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
            )
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    def _get(self, url: str, headers: Optional[Dict] = None) -> httpx.Response:
        response = self._http().get(url, headers=headers or {})
        response.raise_for_status()
        return response

    def inspect_profile_url(self, profile_url: str, job_context: Optional[Dict] = None) -> InspectionResult:
        """
        Inspect a profile URL for the given job context.

        Args:
            profile_url: Candidate profile link
            job_context: {"skills": [...], "category": str, "title": str}

        Returns:
            InspectionResult (success False with a reason on any failure)
        """
        if not self.enabled:
            return InspectionResult(success=False, reason="Remote inspection disabled by config")
        if not profile_url:
            return InspectionResult(success=False, reason="No profile URL")

        job_context = job_context or {}
        platform = detect_platform(profile_url)
        try:
            if platform == "github":
                return self._inspect_github(profile_url, job_context)
            if platform == "linkedin":
                return self._inspect_linkedin(profile_url, job_context)
            if platform in ("portfolio", "website"):
                return self._inspect_html(profile_url, job_context, platform)
            return InspectionResult(success=False, reason="Invalid profile URL")
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"⚠️  Profile inspection failed for {profile_url}: {e}")
            return InspectionResult(success=False, reason=str(e) or e.__class__.__name__)

    def _inspect_github(self, profile_url: str, job_context: Dict) -> InspectionResult:
        parts = [p for p in urlparse(profile_url).path.split("/") if p]
        if not parts:
            return InspectionResult(success=False, reason="Invalid GitHub URL")

        username = parts[0]
        headers = {"Authorization": f"token {settings.GITHUB_TOKEN}"} if settings.GITHUB_TOKEN else {}
        repos = self._get(f"{GITHUB_API}/users/{username}/repos?per_page=100", headers=headers).json() or []

        six_months_ago = utc_now() - timedelta(days=182)
        job_skills = [str(s).lower() for s in job_context.get("skills") or []]

        repo_count = len(repos)
        total_stars = sum(int(r.get("stargazers_count") or 0) for r in repos)
        recent_activity = 0
        relevant_repos = 0
        for repo in repos:
            pushed = repo.get("pushed_at")
            if pushed and pushed[:19] >= six_months_ago.strftime("%Y-%m-%dT%H:%M:%S"):
                recent_activity += 1
            language = (repo.get("language") or "").lower()
            if job_skills and language and any(skill in language for skill in job_skills):
                relevant_repos += 1

        score = 0
        if repo_count >= 3:
            score += 15
        if total_stars >= 10:
            score += 10
        if recent_activity >= 1:
            score += 20
        if relevant_repos >= 1:
            score += 15

        details = {
            "platform": "github",
            "username": username,
            "repo_count": repo_count,
            "total_stars": total_stars,
            "recent_activity_count": recent_activity,
            "relevant_repo_count": relevant_repos,
        }
        return InspectionResult(success=True, extra_score=min(MAX_EXTRA_SCORE, score), details=details)

    def _inspect_linkedin(self, profile_url: str, job_context: Dict) -> InspectionResult:
        markup = self._get(profile_url).text
        if LINKEDIN_BLOCKED_PATTERN.search(markup or ""):
            return InspectionResult(
                success=True,
                extra_score=0,
                details={
                    "platform": "linkedin",
                    "confidence_level": "low",
                    "summary": "LinkedIn page requires login or is blocked; public data inaccessible.",
                },
            )

        text = html_to_text(markup)
        job_skills = [str(s).lower() for s in job_context.get("skills") or []]
        role = str(job_context.get("title") or job_context.get("category") or "").lower()

        role_matches = text.count(role) if role else 0
        intern_matches = len(re.findall(r"intern(ship)?s?|freelance|contract", text))
        if role_matches >= 2:
            experience_score = 10
        elif role_matches == 1:
            experience_score = 6
        elif intern_matches >= 1:
            experience_score = min(6, 3 + intern_matches)
        else:
            experience_score = 0

        skill_matches = sum(1 for s in job_skills if s in text)
        has_project_links = any(PROJECT_LINK_PATTERN.search(link.lower()) for link in html_links(markup))
        if skill_matches >= 3 and has_project_links:
            skill_evidence_score = 10
        elif skill_matches >= 2 or (skill_matches >= 1 and has_project_links):
            skill_evidence_score = 7
        elif skill_matches == 1:
            skill_evidence_score = 3
        else:
            skill_evidence_score = 0

        activity_score = 0
        years = [int(y) for y in re.findall(r"\b(20\d{2})\b", text) if int(y) in _recent_years()]
        if years:
            age = utc_now().year - max(years)
            activity_score = 4 if age == 0 else 3 if age == 1 else 2
        elif re.search(r"posted|published|updated", text):
            activity_score = 2

        extra = min(MAX_EXTRA_SCORE, (experience_score + skill_evidence_score + activity_score) * 3)
        details = {
            "platform": "linkedin",
            "experience_score": experience_score,
            "skill_evidence_score": skill_evidence_score,
            "activity_score": activity_score,
            "internship_mentions": intern_matches,
        }
        return InspectionResult(success=True, extra_score=extra, details=details)

    def _inspect_html(self, profile_url: str, job_context: Dict, platform: str) -> InspectionResult:
        markup = self._get(profile_url).text
        text = html_to_text(markup)
        job_skills = [str(s).lower() for s in job_context.get("skills") or []]

        project_hits = sum(1 for k in PROJECT_KEYWORDS if k in text)
        tools_found = [t for t in TOOLS if t in text]
        skill_matches = sum(1 for s in job_skills if s in text)
        recent = any(str(y) in text for y in _recent_years())
        project_links = sum(1 for link in html_links(markup) if PROJECT_LINK_PATTERN.search(link.lower()))

        score = 0
        if project_hits >= 1:
            score += 20
        if len(tools_found) >= 2:
            score += 15
        if skill_matches >= 1:
            score += min(20, skill_matches * 8)
        if recent:
            score += 10

        details = {
            "platform": platform,
            "title": html_title(markup),
            "project_hits": project_hits,
            "project_links": project_links,
            "tools_found": tools_found,
            "skill_match_count": skill_matches,
        }
        return InspectionResult(success=True, extra_score=min(MAX_EXTRA_SCORE, score), details=details)
