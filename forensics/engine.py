"""
engine.py
──────────────────────────────────────────────────────────────────────────────
The ONLY file a caller needs to import.

Usage:
    from forensics.engine import analyze
    result = analyze(transactions)          # list of transaction dicts

    from forensics.engine import handle_request
    status, body = handle_request({"transactions": transactions})

Every call rebuilds everything from scratch; nothing is kept between calls.
"""

import concurrent.futures
import time
from collections.abc import Mapping
from datetime import datetime

from forensics.errors            import AnalysisError, TransactionValidationError
from forensics.graph_builder     import REQUIRED_COLUMNS, build_graph, to_frame, transaction_counts
from forensics.cycle_detector    import detect_cycles
from forensics.smurfing_detector import detect_smurfing
from forensics.shell_detector    import detect_shell_chains
from forensics.scorer            import score_accounts
from forensics.report            import assemble_report

# ── Limits ────────────────────────────────────────────────────────────────────
MAX_TRANSACTIONS = 10_000


def validate_transactions(transactions) -> None:
    """
    Rejects a batch before any graph is built:
      - not a list
      - more than MAX_TRANSACTIONS items
      - an item that is not an object or lacks a required field
    """
    if not isinstance(transactions, list):
        raise TransactionValidationError("Invalid transactions data")

    if len(transactions) > MAX_TRANSACTIONS:
        raise TransactionValidationError(f"Maximum {MAX_TRANSACTIONS:,} transactions allowed")

    for i, tx in enumerate(transactions):
        if not isinstance(tx, Mapping):
            raise TransactionValidationError(f"Transaction {i} is not an object")
        missing = [col for col in REQUIRED_COLUMNS if col not in tx]
        if missing:
            raise TransactionValidationError(
                f"Transaction {i} is missing fields: {', '.join(missing)}"
            )


def analyze(transactions: list[dict], now: datetime | None = None, parallel: bool = False) -> dict:
    """
    Full pipeline:
      Transactions → Graph → Detect → Score → Report

    now      : timestamp stamped into summary.analysis_timestamp (default: current UTC time)
    parallel : run the three detectors on a thread pool; output is identical

    Raises TransactionValidationError for a rejected batch and AnalysisError
    for anything that fails afterwards. There is no partial result.
    """

    validate_transactions(transactions)

    try:
        return _run_pipeline(transactions, now, parallel)
    except Exception as exc:
        print(f"[engine] Analysis failed: {exc!r}")
        raise AnalysisError(str(exc) or "Analysis failed") from exc


def handle_request(payload, now: datetime | None = None) -> tuple[int, dict]:
    """
    Request boundary: {"transactions": [...]} in, (HTTP status, JSON body) out.

      200 → the analysis result
      400 → {"error": ...} for a rejected batch
      500 → {"error": ...} when the analysis itself failed
    """
    transactions = payload.get("transactions") if isinstance(payload, Mapping) else None

    try:
        return 200, analyze(transactions, now=now)
    except TransactionValidationError as exc:
        return 400, {"error": str(exc)}
    except AnalysisError as exc:
        return 500, {"error": str(exc)}


# ─────────────────────────────────────────────────────────────────────────────
#  INTERNAL HELPERS
# ─────────────────────────────────────────────────────────────────────────────

def _run_pipeline(transactions: list[dict], now: datetime | None, parallel: bool) -> dict:

    start_time = time.time()

    # ── Stage 1: Build graph ──────────────────────────────────────────────────
    print("\n══ Stage 1: Building graph ══")
    df        = to_frame(transactions)
    G         = build_graph(df)
    tx_counts = transaction_counts(df)

    # ── Stage 2: Run all three detectors ─────────────────────────────────────
    print("\n══ Stage 2: Running detectors ══")
    if parallel:
        with concurrent.futures.ThreadPoolExecutor(max_workers=3) as pool:
            f_cycles = pool.submit(detect_cycles, G)
            f_smurf  = pool.submit(detect_smurfing, df)
            f_shells = pool.submit(detect_shell_chains, G, tx_counts)
            cycles       = f_cycles.result()
            smurfing     = f_smurf.result()
            shell_chains = f_shells.result()
    else:
        cycles       = detect_cycles(G)
        smurfing     = detect_smurfing(df)
        shell_chains = detect_shell_chains(G, tx_counts)

    # ── Stage 3: Score accounts ───────────────────────────────────────────────
    print("\n══ Stage 3: Scoring accounts ══")
    suspicious_accounts = score_accounts(df, cycles, smurfing, shell_chains, tx_counts)

    # ── Stage 4: Build the final output structure ─────────────────────────────
    print("\n══ Stage 4: Building output ══")
    result = assemble_report(
        G                   = G,
        transactions        = transactions,
        cycles              = cycles,
        smurfing            = smurfing,
        shell_chains        = shell_chains,
        suspicious_accounts = suspicious_accounts,
        now                 = now,
    )

    summary = result["summary"]
    processing_time = round(time.time() - start_time, 2)
    print(f"\n══ DONE in {processing_time}s ══")
    print(f"   Accounts analyzed : {summary['total_accounts']}")
    print(f"   Suspicious flagged: {summary['suspicious_accounts_count']}")
    print(f"   Fraud rings found : {summary['fraud_rings_detected']}")

    return result
