"""Two-pointer merge of sorted baseline and candidate path lists."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class Reconciliation:
    """Partition of two path sets.

    ``added`` holds candidate-only paths, ``removed`` baseline-only paths and
    ``common`` paths present in both. All three keep sorted input order.
    """

    added: list[str]
    removed: list[str]
    common: list[str]


def reconcile_paths(baseline: Sequence[str], candidate: Sequence[str]) -> Reconciliation:
    """Merge two lexicographically sorted path sequences in one forward pass.

    Both inputs must already be sorted; unsorted input is not detected.

    Args:
        baseline: Relative paths from the baseline tree.
        candidate: Relative paths from the candidate tree.

    Returns:
        Reconciliation with added, removed and common paths.
    """
    added: list[str] = []
    removed: list[str] = []
    common: list[str] = []

    bi = ci = 0
    bn, cn = len(baseline), len(candidate)
    while bi < bn or ci < cn:
        if ci == cn:
            removed.append(baseline[bi])
            bi += 1
        elif bi == bn:
            added.append(candidate[ci])
            ci += 1
        elif baseline[bi] == candidate[ci]:
            common.append(baseline[bi])
            bi += 1
            ci += 1
        elif baseline[bi] < candidate[ci]:
            removed.append(baseline[bi])
            bi += 1
        else:
            added.append(candidate[ci])
            ci += 1

    return Reconciliation(added=added, removed=removed, common=common)
