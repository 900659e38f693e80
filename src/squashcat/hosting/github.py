"""GitHub REST client covering the calls a squash-merge batch needs.

Requests are made exactly once: failed network operations are not
retried, the error is raised and the repository is marked failed.
"""

from __future__ import annotations

import base64
import binascii
from typing import Any

import httpx

from squashcat.core.log import logger
from squashcat.hosting.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    HostingError,
    NotFoundError,
    ServerError,
    ValidationError,
)
from squashcat.hosting.types import (
    CommitInfo,
    Comparison,
    ReleaseInfo,
    RepositoryRef,
)

DEFAULT_API_URL = "https://api.github.com"


class GitHubClient:
    """Thin synchronous client over httpx.

    Usable as a context manager; close() releases the connection
    pool.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Args:
            token: Token sent as a bearer credential
            base_url: API root (GitHub Enterprise uses
                https://host/api/v3)
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests pass a
                MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "squashcat",
            },
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # Repositories and branches

    def get_repository(self, repo: RepositoryRef) -> dict[str, Any]:
        return self._request("GET", f"/repos/{repo.full_name}")

    def get_branch_sha(self, repo: RepositoryRef, branch: str) -> str:
        """Tip SHA of a branch.

        Raises:
            NotFoundError: If the branch does not exist
        """
        data = self._request("GET", f"/repos/{repo.full_name}/branches/{branch}")
        return data["commit"]["sha"]

    # Git references

    def get_ref_sha(self, repo: RepositoryRef, branch: str) -> str:
        data = self._request(
            "GET", f"/repos/{repo.full_name}/git/ref/heads/{branch}"
        )
        return data["object"]["sha"]

    def create_ref(self, repo: RepositoryRef, branch: str, sha: str) -> None:
        self._request(
            "POST",
            f"/repos/{repo.full_name}/git/refs",
            json={"ref": f"refs/heads/{branch}", "sha": sha},
        )

    def update_ref(
        self, repo: RepositoryRef, branch: str, sha: str, force: bool = False
    ) -> None:
        self._request(
            "PATCH",
            f"/repos/{repo.full_name}/git/refs/heads/{branch}",
            json={"sha": sha, "force": force},
        )

    def delete_ref(self, repo: RepositoryRef, branch: str) -> None:
        self._request(
            "DELETE", f"/repos/{repo.full_name}/git/refs/heads/{branch}"
        )

    # Commits

    def compare(self, repo: RepositoryRef, base: str, head: str) -> Comparison:
        """Commits on head that are not on base, in API order."""
        data = self._request(
            "GET", f"/repos/{repo.full_name}/compare/{base}...{head}"
        )
        commits = [
            CommitInfo(sha=item["sha"], message=item["commit"]["message"])
            for item in data.get("commits", [])
        ]
        return Comparison(ahead_by=data.get("ahead_by", 0), commits=commits)

    def merge(
        self, repo: RepositoryRef, base: str, head: str, commit_message: str
    ) -> str | None:
        """Merge head into the base branch.

        Returns:
            SHA of the merge commit, or None when there was nothing
            to merge (HTTP 204)

        Raises:
            ConflictError: On a merge conflict (HTTP 409)
        """
        data = self._request(
            "POST",
            f"/repos/{repo.full_name}/merges",
            json={"base": base, "head": head, "commit_message": commit_message},
        )
        return data["sha"] if data else None

    def get_tree_sha(self, repo: RepositoryRef, commit_sha: str) -> str:
        data = self._request(
            "GET", f"/repos/{repo.full_name}/git/commits/{commit_sha}"
        )
        return data["tree"]["sha"]

    def create_commit(
        self, repo: RepositoryRef, message: str, tree: str, parents: list[str]
    ) -> str:
        data = self._request(
            "POST",
            f"/repos/{repo.full_name}/git/commits",
            json={"message": message, "tree": tree, "parents": parents},
        )
        return data["sha"]

    def get_file_text(self, repo: RepositoryRef, path: str, ref: str) -> str:
        """Decoded contents of a file at ref.

        Raises:
            NotFoundError: If the file does not exist at ref
        """
        data = self._request(
            "GET",
            f"/repos/{repo.full_name}/contents/{path}",
            params={"ref": ref},
        )
        try:
            return base64.b64decode(data.get("content", "")).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ValidationError(200, f"Undecodable contents of {path}: {e}") from e

    # Releases

    def create_release(
        self,
        repo: RepositoryRef,
        tag_name: str,
        target_commitish: str,
        name: str,
        body: str,
        draft: bool = False,
        prerelease: bool = False,
    ) -> ReleaseInfo:
        data = self._request(
            "POST",
            f"/repos/{repo.full_name}/releases",
            json={
                "tag_name": tag_name,
                "target_commitish": target_commitish,
                "name": name,
                "body": body,
                "draft": draft,
                "prerelease": prerelease,
            },
        )
        return ReleaseInfo(
            id=data["id"],
            tag_name=data["tag_name"],
            name=data.get("name") or name,
            target_commitish=data.get("target_commitish", target_commitish),
            html_url=data.get("html_url"),
        )

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Send one request.

        Returns:
            Parsed JSON body, or None for an empty (204) response

        Raises:
            HostingError: On any error status or connection failure
        """
        logger.trace(f"{method} {path}")
        try:
            response = self._client.request(method, path, params=params, json=json)
        except httpx.RequestError as e:
            raise ServerError(0, f"Connection error: {e}") from e

        if response.status_code >= 400:
            raise self._parse_error_response(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _parse_error_response(response: httpx.Response) -> HostingError:
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        message = data.get("message") or f"HTTP {response.status_code}"
        docs = data.get("documentation_url")
        status_code = response.status_code

        if status_code == 401:
            return AuthenticationError(status_code, message, docs)
        elif status_code == 403:
            return AuthorizationError(status_code, message, docs)
        elif status_code == 404:
            return NotFoundError(status_code, message, docs)
        elif status_code == 409:
            return ConflictError(status_code, message, docs)
        elif status_code >= 500:
            return ServerError(status_code, message, docs)
        else:
            return ValidationError(status_code, message, docs)
