"""
shell_detector.py
Detects layered shell networks: chains of low-activity "pass-through" accounts.

Pattern:
  ORIGIN → SHELL_1 → SHELL_2 → DESTINATION
            (2–3 txns) (2–3 txns)

A shell account:
  - Has very few total transactions (sender + receiver count in [2, 3])
  - Is NOT the first or last account in the chain

Chains hold MIN_CHAIN_NODES to MAX_CHAIN_NODES accounts. A chain that sits
inside a longer reported chain is dropped, so only the maximal ones survive.
"""

import networkx as nx

from forensics.graph_builder import is_shell_count

# ── Tuneable thresholds ───────────────────────────────────────────────────────
MIN_CHAIN_NODES    = 3     # ORIGIN → SHELL → DESTINATION at minimum
MAX_CHAIN_NODES    = 6     # DFS depth limit
MAX_SHELL_CHAINS   = 100   # hard cap on returned chains


def detect_shell_chains(G: nx.MultiDiGraph, tx_counts: dict[str, int]) -> list[list[str]]:
    """
    Returns up to MAX_SHELL_CHAINS chains, each an ordered list of account ids
    (origin first), in discovery order.

    tx_counts : total transaction count per account (see graph_builder.transaction_counts)
    """

    shells = {acc for acc, count in tx_counts.items() if is_shell_count(count)}

    raw_chains = []

    # Try starting a DFS from every node
    for start_node in G.nodes():
        _dfs_find_chains(
            G       = G,
            shells  = shells,
            path    = [start_node],
            visited = {start_node},
            found   = raw_chains,
        )

    chains = _keep_maximal(raw_chains)[:MAX_SHELL_CHAINS]

    print(f"[shell_detector] Raw paths: {len(raw_chains)} | Chains kept: {len(chains)}")
    return chains


# ─────────────────────────────────────────────────────────────────────────────
#  INTERNAL HELPERS
# ─────────────────────────────────────────────────────────────────────────────

def _dfs_find_chains(
    G       : nx.MultiDiGraph,
    shells  : set,
    path    : list[str],
    visited : set,
    found   : list,
) -> None:
    """
    Records `path` when it is long enough and all intermediates are shells,
    then keeps extending it along outgoing edges.

    DFS stops when:
      - The path already holds MAX_CHAIN_NODES accounts
      - A node is already on the path (no loops inside a chain)
      - The current tail is not a shell: extending would make it an
        intermediate, and the chain could never qualify again
    """

    if len(path) >= MIN_CHAIN_NODES and all(n in shells for n in path[1:-1]):
        found.append(list(path))

    if len(path) >= MAX_CHAIN_NODES:
        return

    current_node = path[-1]
    if len(path) > 1 and current_node not in shells:
        return   # chain broken, tail is a busy account, not a relay

    for neighbor in G.successors(current_node):

        if neighbor in visited:
            continue

        visited.add(neighbor)
        path.append(neighbor)
        _dfs_find_chains(G, shells, path, visited, found)
        path.pop()
        visited.discard(neighbor)


def _keep_maximal(chains: list[list[str]]) -> list[list[str]]:
    """
    Drops every chain that is a contiguous run of a longer (or identical,
    earlier) kept chain. Chains are compared as id sequences, never as
    joined strings.
    Longest chains are considered first; survivors keep discovery order.
    """

    by_length = sorted(range(len(chains)), key=lambda i: len(chains[i]), reverse=True)

    kept    = []
    covered = set()   # every contiguous run (>= MIN_CHAIN_NODES) of a kept chain

    for idx in by_length:
        chain = tuple(chains[idx])
        if chain in covered:
            continue
        kept.append(idx)
        covered.update(_runs(chain))

    return [chains[idx] for idx in sorted(kept)]


def _runs(chain: tuple) -> list[tuple]:
    return [
        chain[i:j]
        for i in range(len(chain))
        for j in range(i + MIN_CHAIN_NODES, len(chain) + 1)
    ]
