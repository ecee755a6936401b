"""
Tests for report assembly and the download export.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import networkx as nx

from forensics.report import (
    MAX_GRAPH_EDGES,
    MAX_REPORTED_SHELL_CHAINS,
    assemble_report,
    build_fraud_rings,
    build_graph_data,
    download_filename,
    get_download_json,
    iso_timestamp,
)

NO_SMURFING = {"fanIn": [], "fanOut": []}


def _tx(i, sender="A", receiver="B"):
    return {"transaction_id": f"T{i}", "sender_id": sender, "receiver_id": receiver,
            "amount": float(i), "timestamp": "2026-02-01T10:00:00Z"}


class TestFraudRings:
    def test_ring_ids_are_one_based_and_padded(self):
        cycles = [["A", "B", "C"]] + [[f"X{i}", f"Y{i}", f"Z{i}", f"W{i}"] for i in range(11)]
        rings = build_fraud_rings(cycles)

        assert rings[0] == {"ring_id": "RING-001", "accounts": ["A", "B", "C"],
                            "cycle_length": 3, "type": "circular_routing"}
        assert rings[11]["ring_id"] == "RING-012"
        assert rings[11]["cycle_length"] == 4

    def test_no_cycles(self):
        assert build_fraud_rings([]) == []


class TestGraphData:
    def test_nodes_carry_score(self):
        G = nx.MultiDiGraph()
        G.add_edge("A", "B")
        G.add_edge("B", "C")
        suspicious = [{"account_id": "B", "score": 45, "reasons": ["Cycle participant"]}]

        data = build_graph_data(G, [_tx(1, "A", "B"), _tx(2, "B", "C")], suspicious)

        assert data["nodes"] == [
            {"id": "A", "suspicious": False, "score": 0},
            {"id": "B", "suspicious": True, "score": 45},
            {"id": "C", "suspicious": False, "score": 0},
        ]

    def test_edges_are_verbatim_and_capped(self):
        txs = [_tx(i) for i in range(MAX_GRAPH_EDGES + 500)]
        data = build_graph_data(nx.MultiDiGraph(), txs, [])

        assert len(data["edges"]) == MAX_GRAPH_EDGES
        assert data["edges"][0] == {"source": "A", "target": "B", "amount": 0.0, "transaction_id": "T0"}
        # parallel transfers are not merged
        assert data["edges"][1]["transaction_id"] == "T1"

    def test_edge_endpoints_are_string_ids(self):
        G = nx.MultiDiGraph()
        G.add_edge("1", "2")
        tx = {"transaction_id": "T1", "sender_id": 1, "receiver_id": 2,
              "amount": 5.0, "timestamp": "2026-02-01T10:00:00Z"}

        data = build_graph_data(G, [tx], [])

        node_ids = {node["id"] for node in data["nodes"]}
        assert data["edges"][0]["source"] == "1"
        assert data["edges"][0]["target"] == "2"
        assert {data["edges"][0]["source"], data["edges"][0]["target"]} <= node_ids


class TestAssembleReport:
    def test_shell_chains_truncated_but_counted(self):
        chains = [[f"O{i}", f"S{i}", f"D{i}"] for i in range(60)]
        report = assemble_report(nx.MultiDiGraph(), [], [], NO_SMURFING, chains, [])

        assert len(report["shell_chains"]) == MAX_REPORTED_SHELL_CHAINS
        assert report["summary"]["shell_chains_detected"] == 60

    def test_summary_fields(self):
        G = nx.MultiDiGraph()
        G.add_edge("A", "B")
        smurfing = {"fanIn": [{"receiver": "B", "senders": ["A"], "count": 1}], "fanOut": []}
        now = datetime(2026, 2, 1, 10, 0, tzinfo=timezone.utc)

        report = assemble_report(G, [_tx(1)], [["A", "B", "C"]], smurfing, [], [], now=now)

        assert report["summary"] == {
            "total_transactions": 1,
            "total_accounts": 2,
            "suspicious_accounts_count": 0,
            "fraud_rings_detected": 1,
            "smurfing_fan_in_detected": 1,
            "smurfing_fan_out_detected": 0,
            "shell_chains_detected": 0,
            "analysis_timestamp": "2026-02-01T10:00:00.000Z",
        }
        assert list(report) == ["suspicious_accounts", "fraud_rings", "smurfing",
                                "shell_chains", "graph", "summary"]


class TestTimestamps:
    def test_converted_to_utc(self):
        tz = timezone(timedelta(hours=5, minutes=30))
        now = datetime(2026, 2, 1, 15, 30, 0, 123456, tzinfo=tz)
        assert iso_timestamp(now) == "2026-02-01T10:00:00.123Z"

    def test_default_is_now(self):
        assert iso_timestamp().endswith("Z")

    def test_download_filename(self):
        now = datetime(2026, 3, 9, 23, 0, tzinfo=timezone.utc)
        assert download_filename(now) == "fraud-analysis-2026-03-09.json"


def test_download_json_shape():
    result = {
        "suspicious_accounts": [{"account_id": "A", "score": 60, "reasons": ["Cycle participant"]}],
        "fraud_rings": [{"ring_id": "RING-001", "accounts": ["A", "B", "C"],
                         "cycle_length": 3, "type": "circular_routing"}],
        "smurfing": {
            "fanIn": [{"receiver": "H", "senders": ["S1"], "count": 10}],
            "fanOut": [{"sender": "F", "receivers": ["R1"], "count": 11}],
        },
        "shell_chains": [[f"O{i}", "S", "D"] for i in range(15)],
        "graph": {"nodes": [], "edges": []},
        "summary": {"total_transactions": 3},
    }

    export = get_download_json(result)

    assert "graph" not in export
    assert export["suspicious_accounts"] == [
        {"account_id": "A", "suspicion_score": 60, "flags": ["Cycle participant"]}
    ]
    assert export["fraud_rings"][0]["accounts_involved"] == ["A", "B", "C"]
    assert export["summary"]["total_transactions"] == 3
    assert export["summary"]["smurfing_fan_in"] == [{"receiver": "H", "sender_count": 10}]
    assert export["summary"]["smurfing_fan_out"] == [{"sender": "F", "receiver_count": 11}]
    assert len(export["summary"]["shell_chains_sample"]) == 10
    assert export["summary"]["shell_chains_sample"][0] == {"chain": ["O0", "S", "D"]}
