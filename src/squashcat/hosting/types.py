"""Data returned by the hosting API."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RepositoryRef:
    """An owner/name pair."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, identifier: str) -> "RepositoryRef | None":
        """Parse "owner/name".

        Returns None unless the identifier splits into exactly two
        non-empty segments.
        """
        parts = identifier.split("/")
        if len(parts) != 2 or not all(parts):
            return None
        return cls(owner=parts[0], name=parts[1])

    def __str__(self) -> str:
        return self.full_name


@dataclass
class CommitInfo:
    """One commit from a comparison."""

    sha: str
    message: str

    @property
    def short_sha(self) -> str:
        return self.sha[:8]

    @property
    def first_line(self) -> str:
        return self.message.split("\n")[0]


@dataclass
class Comparison:
    """Result of comparing base...head."""

    ahead_by: int
    commits: list[CommitInfo] = field(default_factory=list)


@dataclass
class ReleaseInfo:
    """A created release."""

    id: int
    tag_name: str
    name: str
    target_commitish: str
    html_url: str | None = None
    target_sha: str | None = None
