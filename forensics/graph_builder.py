"""
graph_builder.py
Turns the validated transaction list into the two structures every detector reads:
  - df : DataFrame, one row per transaction, timestamps parsed to UTC
  - G  : directed multigraph, account = node, transaction = edge with metadata

Node and neighbour order in G follows first insertion (sender before receiver),
which keeps every downstream traversal reproducible for a given input.
"""

import pandas as pd
import networkx as nx

REQUIRED_COLUMNS = ["transaction_id", "sender_id", "receiver_id", "amount", "timestamp"]
ID_COLUMNS       = ["transaction_id", "sender_id", "receiver_id"]

# ── Tuneable thresholds ───────────────────────────────────────────────────────
MIN_SHELL_TX = 2      # an account with 2–3 transactions in total looks like a relay
MAX_SHELL_TX = 3


def to_frame(transactions: list[dict]) -> pd.DataFrame:
    """
    Builds the transaction DataFrame.

    Row order is input order. Adds a `ts` column (tz-aware UTC); naive
    timestamps are read as UTC. An unparseable timestamp raises here.
    """
    df = pd.DataFrame(list(transactions), columns=REQUIRED_COLUMNS)

    for col in ID_COLUMNS:
        df[col] = df[col].astype(str)

    df["ts"] = pd.to_datetime(df["timestamp"], utc=True, format="mixed")
    return df


def build_graph(df: pd.DataFrame) -> nx.MultiDiGraph:
    """One edge per transaction; nodes appear lazily as sender or receiver."""
    G = nx.MultiDiGraph()

    for row in df.itertuples(index=False):
        G.add_edge(
            row.sender_id,              # source node
            row.receiver_id,            # target node
            transaction_id = row.transaction_id,
            amount         = row.amount,
            timestamp      = row.ts,
        )

    print(f"[graph_builder] Nodes: {G.number_of_nodes()} | Edges: {G.number_of_edges()}")
    return G


def transaction_counts(df: pd.DataFrame) -> dict[str, int]:
    """
    Total transactions per account: +1 as sender, +1 as receiver.
    A self-transfer therefore counts twice for the same account.

    Ordered by first appearance, scanning each row sender-then-receiver.
    """
    # ravel() on the (n, 2) block interleaves sender_0, receiver_0, sender_1, ...
    endpoints = pd.Series(df[["sender_id", "receiver_id"]].to_numpy().ravel(), dtype=object)
    counts    = endpoints.groupby(endpoints, sort=False).size()
    return {acc: int(n) for acc, n in counts.items()}


def is_shell_count(count: int) -> bool:
    return MIN_SHELL_TX <= count <= MAX_SHELL_TX
