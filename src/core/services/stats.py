"""Blocklist statistics (TLD and parent-domain histograms)."""

from __future__ import annotations

from collections import Counter

from core.domain.models import CountEntry, DomainSet, ListStats


def compute_stats(domain_set: DomainSet, *, top_n: int = 10) -> ListStats:
    tlds: Counter[str] = Counter()
    parents: Counter[str] = Counter()
    for domain in domain_set.domains:
        labels = domain.split(".")
        tlds[labels[-1]] += 1
        if len(labels) >= 2:
            parents[".".join(labels[-2:])] += 1

    def top(counter: Counter[str], n: int) -> list[CountEntry]:
        # Ties broken alphabetically.
        ranked = sorted(counter.items(), key=lambda kv: (-kv[1], kv[0]))[:n]
        return [CountEntry(label=label, count=count) for label, count in ranked]

    return ListStats(
        total=domain_set.size,
        top_tlds=top(tlds, top_n),
        top_parents=top(parents, top_n * 2),
    )


def format_stats_block(stats: ListStats) -> list[str]:
    """Plain-text block appended to the run log after each build."""

    lines = [
        "Blocklist Statistics",
        "====================",
        "",
        f"Total unique domains: {stats.total}",
        "",
        f"Top {len(stats.top_tlds)} TLDs:",
    ]
    lines.extend(f"{entry.count:>7} {entry.label}" for entry in stats.top_tlds)
    lines.extend(["", f"Top {len(stats.top_parents)} parent domains:"])
    lines.extend(f"{entry.count:>7} {entry.label}" for entry in stats.top_parents)
    lines.append("")
    return lines
