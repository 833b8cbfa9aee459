"""Core data models shared across gitreport components."""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class RawItem:
    """One issue or one commit fetched from GitHub."""

    kind: str
    author: str
    title: str
    url: str
    html_url: str
    body: Optional[str] = None
    labels: Tuple[str, ...] = ()
    number: int = 0
    sha: Optional[str] = None

    @property
    def comments_url(self) -> str:
        return f"{self.url}/comments"


@dataclass(frozen=True)
class Comment:
    """A single issue comment."""

    author: str
    body: Optional[str] = None


@dataclass(frozen=True)
class CommunityProfile:
    """Subset of the repository community profile used for validation."""

    description: Optional[str]
    has_readme: bool


@dataclass
class RepositoryOverview:
    """Validated repository identity plus the context gathered up front."""

    full_name: str
    summary: str
    contributors: frozenset = field(default_factory=frozenset)


@dataclass
class FinalReport:
    """Correlated report for one target contributor."""

    target: str
    text: str
    fields: Dict[str, str] = field(default_factory=dict)
