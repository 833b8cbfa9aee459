"""GitHub REST client for the report pipeline.

Every public method returns a value or a failure sentinel (``None`` or an
empty collection) and logs the cause. Transport errors never escape; callers
decide whether an absent result is fatal.
"""

from __future__ import annotations

import base64
import binascii
import json
import os
from http.client import HTTPException
from datetime import UTC, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from ..logging import get_logger
from ..models import Comment, CommunityProfile, RawItem

_AUTO_TOKEN = object()


class GitHubError(RuntimeError):
    """Raised internally when a GitHub request fails."""


class GitHubClient:
    """Fetches issues, commits, comments, patches and profile data."""

    DEFAULT_API_URL = "https://api.github.com"
    ENV_TOKEN_KEYS = ("GITREPORT_GITHUB_TOKEN", "GITHUB_TOKEN")
    USER_AGENT = "gitreport/0.1"
    PAGE_SIZE = 100
    SEARCH_PAGES = 2
    CONTRIBUTOR_PAGES = 49

    def __init__(
        self,
        *,
        api_url: str | None = None,
        token: str | None | object = _AUTO_TOKEN,
        request_timeout: float = 30.0,
    ) -> None:
        self.api_url = (api_url or self.DEFAULT_API_URL).rstrip("/")
        self.token = self._resolve_token(token)
        self.request_timeout = request_timeout
        self.logger = get_logger("github")

    # -- search ---------------------------------------------------------

    def get_issues(
        self,
        owner: str,
        repo: str,
        user: str | None = None,
        days: int = 7,
        token: str | None = None,
    ) -> Tuple[int, List[RawItem]]:
        """Issues in ``owner/repo`` updated within the last ``days`` days."""
        since = (self._now() - timedelta(days=days)).strftime("%Y-%m-%dT%H:%M:%SZ")
        query = f"repo:{owner}/{repo} is:issue"
        if user:
            query += f" involves:{user}"
        query += f" updated:>{since}"

        items: List[RawItem] = []
        for raw in self._search("issues", query, sort="updated", token=token):
            issue = self._issue_from_payload(raw)
            if issue is not None:
                items.append(issue)
        return len(items), items

    def get_commits(
        self,
        owner: str,
        repo: str,
        user: str | None = None,
        days: int = 7,
        token: str | None = None,
    ) -> Tuple[int, List[RawItem]]:
        """Commits in ``owner/repo`` committed within the last ``days`` days."""
        since = (self._now() - timedelta(days=days)).date().isoformat()
        query = f"repo:{owner}/{repo}"
        if user:
            query += f" author:{user}"
        query += f" committer-date:>{since}"

        items: List[RawItem] = []
        for raw in self._search("commits", query, sort="committer-date", token=token):
            commit = self._commit_from_payload(raw)
            if commit is not None:
                items.append(commit)
        return len(items), items

    # -- per-item context -----------------------------------------------

    def get_comments(self, comments_url: str, token: str | None = None) -> Optional[List[Comment]]:
        """Comments for one issue, most recently updated first; ``None`` on failure."""
        url = self._with_query(
            comments_url, {"sort": "updated", "direction": "desc", "per_page": self.PAGE_SIZE}
        )
        try:
            payload = self._get_json(url, token=token)
        except GitHubError as exc:
            self.logger.warning("Failed to fetch comments from %s: %s", comments_url, exc)
            return None
        if not isinstance(payload, list):
            self.logger.warning("Unexpected comments payload from %s", comments_url)
            return None
        comments: List[Comment] = []
        for raw in payload:
            if not isinstance(raw, dict):
                continue
            author = _login(raw.get("user"))
            if not author:
                continue
            body = raw.get("body")
            comments.append(Comment(author=author, body=body if isinstance(body, str) else None))
        return comments

    def get_patch(self, commit_url: str, token: str | None = None) -> Optional[str]:
        """Raw ``.patch`` text for a commit's HTML URL; ``None`` on failure."""
        try:
            raw = self._get(f"{commit_url}.patch", token=token, accept="text/plain")
        except GitHubError as exc:
            self.logger.warning("Failed to fetch patch for %s: %s", commit_url, exc)
            return None
        return raw.decode("utf-8", errors="replace")

    # -- repository / user metadata ------------------------------------

    def get_readme(self, owner: str, repo: str, token: str | None = None) -> Optional[str]:
        try:
            payload = self._get_json(f"{self.api_url}/repos/{owner}/{repo}/readme", token=token)
        except GitHubError as exc:
            self.logger.warning("Failed to fetch README for %s/%s: %s", owner, repo, exc)
            return None
        content = payload.get("content") if isinstance(payload, dict) else None
        if not isinstance(content, str):
            self.logger.warning("README content for %s/%s is empty", owner, repo)
            return None
        try:
            return base64.b64decode(content.replace("\n", "")).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            self.logger.warning("Failed to decode README for %s/%s: %s", owner, repo, exc)
            return None

    def get_contributors(self, owner: str, repo: str, token: str | None = None) -> List[str]:
        """Contributor logins; a failing page stops pagination but keeps what was read."""
        logins: List[str] = []
        for page in range(1, self.CONTRIBUTOR_PAGES + 1):
            url = self._with_query(
                f"{self.api_url}/repos/{owner}/{repo}/contributors",
                {"per_page": self.PAGE_SIZE, "page": page},
            )
            try:
                payload = self._get_json(url, token=token)
            except GitHubError as exc:
                self.logger.warning("Contributor listing stopped at page %d: %s", page, exc)
                break
            if not isinstance(payload, list):
                break
            logins.extend(login for login in (_login(user) for user in payload) if login)
            if len(payload) < self.PAGE_SIZE:
                break
        return logins

    def get_community_profile(
        self, owner: str, repo: str, token: str | None = None
    ) -> Optional[CommunityProfile]:
        try:
            payload = self._get_json(
                f"{self.api_url}/repos/{owner}/{repo}/community/profile", token=token
            )
        except GitHubError as exc:
            self.logger.warning("No community profile for %s/%s: %s", owner, repo, exc)
            return None
        if not isinstance(payload, dict):
            return None
        description = payload.get("description")
        files = payload.get("files") if isinstance(payload.get("files"), dict) else {}
        readme = files.get("readme") if isinstance(files, dict) else None
        has_readme = isinstance(readme, dict) and bool(readme.get("url"))
        return CommunityProfile(
            description=description if isinstance(description, str) else None,
            has_readme=has_readme,
        )

    def get_user_profile(self, login: str, token: str | None = None) -> Optional[str]:
        """One-line profile description of a user, or ``None``."""
        try:
            payload = self._get_json(f"{self.api_url}/users/{quote(login)}", token=token)
        except GitHubError as exc:
            self.logger.warning("Failed to fetch profile for %s: %s", login, exc)
            return None
        if not isinstance(payload, dict):
            return None
        labels = (
            ("name", "Name"),
            ("login", "Login"),
            ("html_url", "Url"),
            ("twitter_username", "Twitter"),
            ("bio", "Bio"),
            ("company", "Company"),
            ("location", "Location"),
            ("blog", "Blog"),
        )
        parts = [
            f"{label}: {payload[key]}"
            for key, label in labels
            if isinstance(payload.get(key), str) and payload[key].strip()
        ]
        created = payload.get("created_at")
        if isinstance(created, str) and created:
            parts.append(f"Created At: {created[:10]}")
        if not parts:
            return None
        return "User profile: " + ", ".join(parts)

    # -- plumbing -------------------------------------------------------

    def _search(self, kind: str, query: str, *, sort: str, token: str | None) -> List[Dict[str, Any]]:
        results: List[Dict[str, Any]] = []
        for page in range(1, self.SEARCH_PAGES + 1):
            url = self._with_query(
                f"{self.api_url}/search/{kind}",
                {"q": query, "sort": sort, "order": "desc", "per_page": self.PAGE_SIZE, "page": page},
            )
            try:
                payload = self._get_json(url, token=token)
            except GitHubError as exc:
                self.logger.warning("Search for %s page %d failed: %s", kind, page, exc)
                continue
            items = payload.get("items") if isinstance(payload, dict) else None
            if not isinstance(items, list):
                break
            results.extend(item for item in items if isinstance(item, dict))
            if len(items) < self.PAGE_SIZE:
                break
        return results

    @staticmethod
    def _issue_from_payload(raw: Dict[str, Any]) -> Optional[RawItem]:
        author = _login(raw.get("user"))
        url = raw.get("url")
        if not author or not isinstance(url, str):
            return None
        labels = tuple(
            str(label.get("name"))
            for label in raw.get("labels") or []
            if isinstance(label, dict) and label.get("name")
        )
        body = raw.get("body")
        return RawItem(
            kind="issue",
            author=author,
            title=str(raw.get("title") or ""),
            body=body if isinstance(body, str) else None,
            labels=labels,
            url=url,
            html_url=str(raw.get("html_url") or url),
            number=int(raw.get("number") or 0),
        )

    @staticmethod
    def _commit_from_payload(raw: Dict[str, Any]) -> Optional[RawItem]:
        # Commits whose author has no GitHub account cannot be attributed.
        author = _login(raw.get("author"))
        html_url = raw.get("html_url")
        if not author or not isinstance(html_url, str):
            return None
        details = raw.get("commit") if isinstance(raw.get("commit"), dict) else {}
        return RawItem(
            kind="commit",
            author=author,
            title=str(details.get("message") or ""),
            url=str(raw.get("url") or html_url),
            html_url=html_url,
            sha=raw.get("sha") if isinstance(raw.get("sha"), str) else None,
        )

    def _get_json(self, url: str, *, token: str | None) -> Any:
        raw = self._get(url, token=token, accept="application/vnd.github+json")
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise GitHubError(f"invalid JSON from {url}") from exc

    def _get(self, url: str, *, token: str | None, accept: str) -> bytes:
        headers = {"Accept": accept, "User-Agent": self.USER_AGENT}
        effective_token = token or self.token
        if effective_token:
            headers["Authorization"] = f"Bearer {effective_token}"
        request = Request(url, headers=headers, method="GET")
        try:
            with urlopen(request, timeout=self.request_timeout) as response:  # type: ignore[arg-type]
                return response.read()
        except HTTPError as exc:
            raise GitHubError(f"GitHub HTTP error {exc.code} for {url}") from exc
        except URLError as exc:
            raise GitHubError(f"GitHub request failed: {exc.reason}") from exc
        except TimeoutError as exc:
            raise GitHubError(f"GitHub request timed out: {url}") from exc
        except (OSError, HTTPException) as exc:
            raise GitHubError(f"GitHub connection failed for {url}: {exc!r}") from exc

    @staticmethod
    def _with_query(url: str, params: Dict[str, Any]) -> str:
        separator = "&" if "?" in url else "?"
        return f"{url}{separator}{urlencode(params)}"

    def _resolve_token(self, token: str | None | object) -> str | None:
        if token is not _AUTO_TOKEN:
            return token  # type: ignore[return-value]
        for key in self.ENV_TOKEN_KEYS:
            value = os.getenv(key)
            if value:
                return value
        return None

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)


def _login(user: Any) -> Optional[str]:
    if isinstance(user, dict):
        login = user.get("login")
        if isinstance(login, str) and login:
            return login
    return None


__all__ = ["GitHubClient", "GitHubError"]
