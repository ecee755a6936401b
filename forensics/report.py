"""
report.py
Packages detector output into the response document:

{
    "suspicious_accounts": [...],   ← sorted by score descending
    "fraud_rings"        : [...],   ← one per cycle, RING-001, RING-002, ...
    "smurfing"           : {"fanIn": [...], "fanOut": [...]},
    "shell_chains"       : [[...], ...],
    "graph"              : {"nodes": [...], "edges": [...]},
    "summary"            : {...},
}
"""

from datetime import datetime, timezone

import networkx as nx

# ── Output caps ───────────────────────────────────────────────────────────────
MAX_GRAPH_EDGES            = 2000
MAX_REPORTED_SHELL_CHAINS  = 50
DOWNLOAD_SHELL_SAMPLE      = 10

RING_TYPE = "circular_routing"


def build_fraud_rings(cycles: list[list[str]]) -> list[dict]:
    return [
        {
            "ring_id"     : f"RING-{i:03d}",
            "accounts"    : list(cycle),
            "cycle_length": len(cycle),
            "type"        : RING_TYPE,
        }
        for i, cycle in enumerate(cycles, start=1)
    ]


def build_graph_data(
    G                   : nx.MultiDiGraph,
    transactions        : list[dict],
    suspicious_accounts : list[dict],
) -> dict:
    """
    Nodes: every account, flagged with its score (0 when not suspicious).
    Edges: the first MAX_GRAPH_EDGES input transactions as-is, with the
    endpoints as string ids like the nodes; parallel transfers between
    the same pair stay separate edges.
    """
    scores = {acc["account_id"]: acc["score"] for acc in suspicious_accounts}

    nodes = [
        {
            "id"        : node,
            "suspicious": node in scores,
            "score"     : scores.get(node, 0),
        }
        for node in G.nodes()
    ]

    edges = [
        {
            "source"        : str(tx["sender_id"]),
            "target"        : str(tx["receiver_id"]),
            "amount"        : tx["amount"],
            "transaction_id": tx["transaction_id"],
        }
        for tx in transactions[:MAX_GRAPH_EDGES]
    ]

    return {"nodes": nodes, "edges": edges}


def build_summary(
    total_transactions  : int,
    total_accounts      : int,
    suspicious_accounts : list[dict],
    fraud_rings         : list[dict],
    smurfing            : dict,
    shell_chains        : list[list[str]],
    now                 : datetime | None = None,
) -> dict:
    return {
        "total_transactions"        : total_transactions,
        "total_accounts"            : total_accounts,
        "suspicious_accounts_count" : len(suspicious_accounts),
        "fraud_rings_detected"      : len(fraud_rings),
        "smurfing_fan_in_detected"  : len(smurfing["fanIn"]),
        "smurfing_fan_out_detected" : len(smurfing["fanOut"]),
        "shell_chains_detected"     : len(shell_chains),
        "analysis_timestamp"        : iso_timestamp(now),
    }


def assemble_report(
    G                   : nx.MultiDiGraph,
    transactions        : list[dict],
    cycles              : list[list[str]],
    smurfing            : dict,
    shell_chains        : list[list[str]],
    suspicious_accounts : list[dict],
    now                 : datetime | None = None,
) -> dict:
    fraud_rings = build_fraud_rings(cycles)

    summary = build_summary(
        total_transactions  = len(transactions),
        total_accounts      = G.number_of_nodes(),
        suspicious_accounts = suspicious_accounts,
        fraud_rings         = fraud_rings,
        smurfing            = smurfing,
        shell_chains        = shell_chains,
        now                 = now,
    )

    return {
        "suspicious_accounts": suspicious_accounts,
        "fraud_rings"        : fraud_rings,
        "smurfing"           : smurfing,
        "shell_chains"       : shell_chains[:MAX_REPORTED_SHELL_CHAINS],
        "graph"              : build_graph_data(G, transactions, suspicious_accounts),
        "summary"            : summary,
    }


def get_download_json(result: dict) -> dict:
    """
    The downloadable report: renamed account / ring fields, no graph, and the
    smurfing hubs plus a sample of shell chains folded into the summary.
    """
    smurfing = result["smurfing"]

    return {
        "suspicious_accounts": [
            {
                "account_id"     : acc["account_id"],
                "suspicion_score": acc["score"],
                "flags"          : acc["reasons"],
            }
            for acc in result["suspicious_accounts"]
        ],
        "fraud_rings": [
            {
                "ring_id"          : ring["ring_id"],
                "accounts_involved": ring["accounts"],
                "cycle_length"     : ring["cycle_length"],
                "type"             : ring["type"],
            }
            for ring in result["fraud_rings"]
        ],
        "summary": {
            **result["summary"],
            "smurfing_fan_in" : [
                {"receiver": fi["receiver"], "sender_count": fi["count"]}
                for fi in smurfing["fanIn"]
            ],
            "smurfing_fan_out": [
                {"sender": fo["sender"], "receiver_count": fo["count"]}
                for fo in smurfing["fanOut"]
            ],
            "shell_chains_sample": [
                {"chain": chain}
                for chain in result["shell_chains"][:DOWNLOAD_SHELL_SAMPLE]
            ],
        },
    }


def download_filename(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"fraud-analysis-{now.date().isoformat()}.json"


def iso_timestamp(now: datetime | None = None) -> str:
    """UTC, millisecond precision, trailing Z, e.g. 2026-02-01T10:00:00.000Z"""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc).replace(tzinfo=None)
    return now.isoformat(timespec="milliseconds") + "Z"
