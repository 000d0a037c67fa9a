"""Keyword filtering, deduplication and merge-forward."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from core.domain.models import DomainSet
from core.errors import NoDomainsError

logger = logging.getLogger(__name__)


def matches(domain: str, keywords: Iterable[str], *, case_sensitive: bool = True) -> bool:
    """True when `domain` contains at least one keyword as a substring.

    An empty keyword set matches everything.
    """

    words = [k for k in keywords if k]
    if not words:
        return True
    if case_sensitive:
        return any(word in domain for word in words)
    lowered = domain.lower()
    return any(word.lower() in lowered for word in words)


@dataclass(frozen=True)
class KeywordFilter:
    keywords: tuple[str, ...] = ()
    case_sensitive: bool = True

    @property
    def enabled(self) -> bool:
        return any(self.keywords)

    def __call__(self, domain: str) -> bool:
        return matches(domain, self.keywords, case_sensitive=self.case_sensitive)


def normalize(
    domains: Iterable[str],
    previous: DomainSet | Iterable[str] | None = None,
) -> DomainSet:
    """Lowercase, deduplicate and sort; union with `previous` when given.

    Normalizing an already-normalized set returns an equal set.
    """

    merged = {d.lower() for d in domains}
    if previous is not None:
        prior = previous.domains if isinstance(previous, DomainSet) else previous
        merged.update(d.lower() for d in prior)
    return DomainSet(domains=merged)


def enforce_non_empty(domain_set: DomainSet, *, allow_empty: bool, name: str) -> str | None:
    """Apply the zero-result policy.

    Returns a warning message when the set is empty and that is allowed;
    raises `NoDomainsError` when it is not.
    """

    if domain_set.size:
        return None
    if not allow_empty:
        raise NoDomainsError(
            f"No domains extracted for '{name}'",
            {"name": name, "allow_empty": False},
        )
    message = f"No domains extracted for '{name}'; writing empty lists"
    logger.warning(message)
    return message
