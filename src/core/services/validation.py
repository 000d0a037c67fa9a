"""Domain-name validation.

A token is accepted as a whole or not at all: no trimming, no partial
repair. Rejections are reported to the caller through `ValidationTally`
so bulk runs can count them and verbose runs can show each one.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

MAX_DOMAIN_LENGTH = 253

_LABEL_RE = re.compile(r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?")


def is_valid_domain(token: str) -> bool:
    if not token or len(token) > MAX_DOMAIN_LENGTH:
        return False
    if token[0] in ".-" or token[-1] in ".-":
        return False
    return all(_LABEL_RE.fullmatch(label) for label in token.split("."))


def validate(token: str) -> str | None:
    """Return the token when it is a valid domain, else None.

    Case is kept so the keyword filter sees the original spelling; the
    normalizer lowercases.
    """

    if is_valid_domain(token):
        return token
    return None


@dataclass
class ValidationTally:
    """Counts accepted/rejected tokens; logs each rejection."""

    verbose: bool = False
    accepted: int = 0
    rejected: int = 0
    samples: list[str] = field(default_factory=list)

    def check(self, token: str) -> str | None:
        domain = validate(token)
        if domain is not None:
            self.accepted += 1
            return domain

        self.rejected += 1
        if len(self.samples) < 20:
            self.samples.append(token)
        if self.verbose:
            logger.warning("Skipping invalid domain: %s", token)
        else:
            logger.debug("Skipping invalid domain: %s", token)
        return None
