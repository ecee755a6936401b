"""
cycle_detector.py
Detects circular fund routing, i.e. money that flows in a loop:
  Example:  A → B → C → A

Rules:
  - Cycles of length 3 to 5 only (simple cycles, no repeated account)
  - A search started at N only walks into accounts whose id is >= N, so each
    loop is found once, from its lexicographically smallest member
  - Rotations of the same loop collapse to one entry; the reverse loop
    (A → C → B → A) is a different cycle
"""

import networkx as nx

# ── Tuneable thresholds ───────────────────────────────────────────────────────
MIN_CYCLE_LENGTH  = 3
MAX_CYCLE_LENGTH  = 5


def detect_cycles(G: nx.MultiDiGraph) -> list[list[str]]:
    """
    Returns every distinct cycle as a list of account ids, smallest id first,
    in discovery order (start nodes and neighbours in graph insertion order).
    """

    cycles = []
    seen   = set()

    for start_node in G.nodes():
        _dfs_find_cycles(
            G       = G,
            start   = start_node,
            path    = [start_node],
            visited = {start_node},
            cycles  = cycles,
            seen    = seen,
        )

    print(f"[cycle_detector] Cycles found: {len(cycles)}")
    return cycles


def normalize_cycle(cycle: list[str]) -> list[str]:
    """Rotates the cycle so that its smallest id comes first."""
    min_idx = cycle.index(min(cycle))
    return cycle[min_idx:] + cycle[:min_idx]


# ─────────────────────────────────────────────────────────────────────────────
#  INTERNAL HELPERS
# ─────────────────────────────────────────────────────────────────────────────

def _dfs_find_cycles(
    G       : nx.MultiDiGraph,
    start   : str,
    path    : list[str],
    visited : set,
    cycles  : list,
    seen    : set,
) -> None:
    """
    Extends `path` one hop at a time. Closing back on `start` with at least
    MIN_CYCLE_LENGTH accounts on the path records a cycle; the path itself
    never grows past MAX_CYCLE_LENGTH accounts.
    """

    current_node = path[-1]

    for neighbor in G.successors(current_node):

        if neighbor == start:
            if len(path) >= MIN_CYCLE_LENGTH:
                cycle = normalize_cycle(path)
                key   = tuple(cycle)
                if key not in seen:
                    seen.add(key)
                    cycles.append(cycle)
            continue

        if neighbor in visited or neighbor < start:
            continue

        if len(path) >= MAX_CYCLE_LENGTH:
            continue   # one more hop would exceed the max loop length

        visited.add(neighbor)
        path.append(neighbor)
        _dfs_find_cycles(G, start, path, visited, cycles, seen)
        path.pop()
        visited.discard(neighbor)
