"""
GitHub issues record source.

Each issue in the configured repository carries one match payload in its
body. Pull requests share the issues endpoint and are skipped.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..core.config import Settings
from ..core.http import BaseApiClient, ExternalAPIError
from .base import RawPayload, RecordSourceError, RecordSourceProtocol

logger = logging.getLogger(__name__)


class GitHubIssuesSource(BaseApiClient, RecordSourceProtocol):
    """Fetch match payloads from a repository's issues."""

    BASE_URL = "https://api.github.com"
    source_name = "github_issues"

    def __init__(
        self,
        repo: str,
        *,
        base_url: str | None = None,
        headers: dict[str, str] | None = None,
        label: Optional[str] = None,
        state: str = "all",
        per_page: int = 100,
        max_pages: int = 50,
        requests_per_minute: int = 60,
        timeout: float = 30.0,
        max_retries: int = 1,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if repo.count("/") != 1 or not all(repo.split("/")):
            raise ValueError(f"repo must look like 'owner/name', got {repo!r}")
        super().__init__(
            base_url=base_url,
            headers=headers or {"User-Agent": "battle-rank-system"},
            requests_per_minute=requests_per_minute,
            timeout=timeout,
            max_retries=max_retries,
            transport=transport,
        )
        self.repo = repo
        self.label = label
        self.state = state
        self.per_page = per_page
        self.max_pages = max_pages

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
        **overrides: Any,
    ) -> "GitHubIssuesSource":
        """Build a source from application settings; keyword overrides win."""
        options: dict[str, Any] = {
            "repo": settings.github_repo,
            "base_url": settings.github_api_url,
            "headers": settings.github_headers,
            "label": settings.github_issue_label,
            "state": settings.github_issue_state,
            "per_page": settings.github_per_page,
            "max_pages": settings.github_max_pages,
            "requests_per_minute": settings.requests_per_minute,
            "timeout": settings.http_timeout,
            "max_retries": settings.http_max_retries,
        }
        options.update({k: v for k, v in overrides.items() if v is not None})
        return cls(transport=transport, **options)

    async def _fetch_page(self, page: int) -> list[dict[str, Any]]:
        params: dict[str, Any] = {
            "state": self.state,
            "per_page": self.per_page,
            "page": page,
            "sort": "created",
            "direction": "asc",
        }
        if self.label:
            params["labels"] = self.label

        try:
            data = await self._get(f"/repos/{self.repo}/issues", params)
        except ExternalAPIError as e:
            raise RecordSourceError(
                f"Fetching issues page {page} of {self.repo} failed: {e.message}"
            ) from e

        if not isinstance(data, list):
            raise RecordSourceError(
                f"Expected a JSON list of issues from {self.repo}, got {type(data).__name__}"
            )
        for item in data:
            if not isinstance(item, dict) or "number" not in item:
                raise RecordSourceError(f"Unexpected issue entry in {self.repo}: {item!r:.200}")
        return data

    async def fetch_payloads(self) -> list[RawPayload]:
        """Fetch all issues, page by page, and return them ordered by issue number."""
        issues: list[dict[str, Any]] = []

        for page in range(1, self.max_pages + 1):
            batch = await self._fetch_page(page)
            issues.extend(batch)
            logger.debug("Fetched %d issues from page %d", len(batch), page)
            if len(batch) < self.per_page:
                break
        else:
            logger.warning(
                "Stopped after %d pages of %s issues; raise GITHUB_MAX_PAGES to fetch more",
                self.max_pages,
                self.repo,
            )

        payloads = [
            RawPayload(
                id=issue["number"],
                body=issue.get("body"),
                created_at=issue.get("created_at"),
            )
            for issue in sorted(issues, key=lambda i: i["number"])
            if "pull_request" not in issue
        ]
        logger.info(
            "Fetched %d issues from %s (%d pull requests skipped)",
            len(issues),
            self.repo,
            len(issues) - len(payloads),
        )
        return payloads
