"""Token extraction: raw record -> candidate domain string.

The cleanup is an ordered chain of small pure steps. Each step takes the
current string and returns a new one, or None to drop the record. Keeping
them separate makes every rule testable on its own and lets the chain be
reordered or extended without touching the others.
"""

from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Collection, Mapping, Sequence

from core.interfaces.source import RawRecord

Step = Callable[[str], "str | None"]

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")
_PORT_RE = re.compile(r":\d*$")
_SEPARATOR_RE = re.compile(r"^[\s\-]*$")

SINK_ADDRESSES: frozenset[str] = frozenset(
    {"0.0.0.0", "127.0.0.1", "::", "::1", "0", "255.255.255.255", "fe80::1%lo0"}
)

# Placeholder names shipped in stock hosts files; never list entries.
LOCAL_HOSTNAMES: frozenset[str] = frozenset(
    {
        "localhost",
        "localhost.localdomain",
        "local",
        "broadcasthost",
        "ip6-localhost",
        "ip6-loopback",
        "ip6-localnet",
        "ip6-mcastprefix",
        "ip6-allnodes",
        "ip6-allrouters",
        "ip6-allhosts",
    }
)


def is_address(value: str, sink_addresses: Collection[str] = SINK_ADDRESSES) -> bool:
    """True for a known sink address or any IPv4/IPv6 literal."""

    if value in sink_addresses:
        return True
    try:
        ipaddress.ip_address(value.split("%", 1)[0])
    except ValueError:
        return False
    return True


def skip_comment(text: str) -> str | None:
    """Drop `#`/`!` comments, blank lines and `-----` markdown separators."""

    stripped = text.strip()
    if not stripped or _SEPARATOR_RE.match(stripped):
        return None
    if stripped.startswith(("#", "!")):
        return None
    return stripped


def strip_hosts_address(text: str, sink_addresses: Collection[str] = SINK_ADDRESSES) -> str | None:
    """`0.0.0.0 example.com  # note` -> `example.com`.

    Placeholder entries such as `127.0.0.1 localhost` or `0.0.0.0 0.0.0.0`
    are dropped.
    """

    fields = text.split()
    if len(fields) >= 2 and is_address(fields[0], sink_addresses):
        host = fields[1]
        if host.startswith("#") or host.lower() in LOCAL_HOSTNAMES or is_address(host, sink_addresses):
            return None
        return host
    return text


def strip_scheme(text: str) -> str | None:
    return _SCHEME_RE.sub("", text, count=1)


def strip_path(text: str) -> str | None:
    """Cut at the first `/`, `?` or `#` (path, query, fragment)."""

    for index, char in enumerate(text):
        if char in "/?#":
            return text[:index]
    return text


def strip_port(text: str) -> str | None:
    return _PORT_RE.sub("", text)


def strip_adblock(text: str) -> str | None:
    """`||tracker.net^` -> `tracker.net`."""

    if text.startswith("||"):
        text = text[2:]
    if text.endswith("^"):
        text = text[:-1]
    return text


DEFAULT_STEPS: tuple[Step, ...] = (
    skip_comment,
    strip_hosts_address,
    strip_scheme,
    strip_path,
    strip_port,
    strip_adblock,
)


def build_steps(sink_address: str | None = None) -> tuple[Step, ...]:
    """Default chain whose hosts step also strips `sink_address`."""

    if not sink_address or sink_address in SINK_ADDRESSES:
        return DEFAULT_STEPS
    hosts_step = partial(strip_hosts_address, sink_addresses=SINK_ADDRESSES | {sink_address})
    return tuple(hosts_step if step is strip_hosts_address else step for step in DEFAULT_STEPS)


def project_record(
    record: Mapping[str, Any],
    *,
    predicate: Mapping[str, str],
    domain_field: str = "domain",
) -> str | None:
    """Return the domain field of a structured record when every predicate pair holds.

    `predicate` compares stringified field values, e.g.
    `{"status": "REQUEST_BLOCKED", "device": "Phone"}`.
    """

    for key, expected in predicate.items():
        if str(record.get(key)) != expected:
            return None
    value = record.get(domain_field)
    if not isinstance(value, str):
        return None
    return value


@dataclass(frozen=True)
class TokenExtractor:
    """Applies the step chain to one record at a time."""

    predicate: Mapping[str, str] = field(default_factory=dict)
    domain_field: str = "domain"
    steps: Sequence[Step] = DEFAULT_STEPS

    def extract(self, record: RawRecord) -> str | None:
        if isinstance(record, Mapping):
            text = project_record(record, predicate=self.predicate, domain_field=self.domain_field)
            if text is None:
                return None
        else:
            text = record

        current: str | None = text
        for step in self.steps:
            current = step(current)
            if current is None:
                return None
        current = current.strip()
        return current or None


_DEFAULT_EXTRACTOR = TokenExtractor()


def extract(record: RawRecord) -> str | None:
    """Extract with the default chain and no record predicate."""

    return _DEFAULT_EXTRACTOR.extract(record)
