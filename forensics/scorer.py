"""
scorer.py
Fuses the detector outputs into one suspicion score per account.

Points (added up, then capped at 100):
  Cycle membership      : +30 per cycle
  Fan-in receiver       : +25        (each of its senders: +10)
  Fan-out sender        : +25
  Shell chain member    : +20 per chain
  Velocity              : up to +20  (outgoing tx/hour above 5)
  Low activity          : +15        (2–3 transactions in total)

Accounts scoring 5 or less are dropped.
"""

import math
from decimal import ROUND_HALF_UP, Decimal

import pandas as pd

from forensics.graph_builder import is_shell_count

# ── Weights ───────────────────────────────────────────────────────────────────
WEIGHT_CYCLE          = 30
WEIGHT_FAN_HUB        = 25
WEIGHT_FAN_IN_SENDER  = 10
WEIGHT_SHELL_CHAIN    = 20
WEIGHT_LOW_ACTIVITY   = 15
MAX_VELOCITY_POINTS   = 20

VELOCITY_THRESHOLD    = 5.0   # outgoing transactions per hour
MIN_REPORTED_SCORE    = 5     # keep accounts strictly above this
MAX_SCORE             = 100


def score_accounts(
    df           : pd.DataFrame,
    cycles       : list[list[str]],
    smurfing     : dict,
    shell_chains : list[list[str]],
    tx_counts    : dict[str, int],
) -> list[dict]:
    """
    Returns the suspicious accounts, highest score first:

    [
        {
            "account_id": "ACC_001",
            "score"     : 85,
            "reasons"   : ["Cycle participant", "Shell account (low tx count)"],
        },
        ...
    ]

    Equal scores keep the order in which the accounts were first scored.
    """

    account_data = {}   # {acc_id: {"score": int, "reasons": [...]}}

    def _ensure(acc_id):
        if acc_id not in account_data:
            account_data[acc_id] = {"score": 0, "reasons": []}
        return account_data[acc_id]

    def _add(acc_id, points, reason):
        data = _ensure(acc_id)
        data["score"] += points
        if reason not in data["reasons"]:
            data["reasons"].append(reason)

    # Cycles
    for cycle in cycles:
        for acc in cycle:
            _add(acc, WEIGHT_CYCLE, "Cycle participant")

    # Smurfing
    for cluster in smurfing["fanIn"]:
        _add(cluster["receiver"], WEIGHT_FAN_HUB, f"Fan-in receiver ({cluster['count']} senders)")
        for sender in cluster["senders"]:
            _add(sender, WEIGHT_FAN_IN_SENDER, "Fan-in participant")

    for cluster in smurfing["fanOut"]:
        _add(cluster["sender"], WEIGHT_FAN_HUB, f"Fan-out sender ({cluster['count']} receivers)")

    # Shell chains
    for chain in shell_chains:
        for acc in chain:
            _add(acc, WEIGHT_SHELL_CHAIN, "Shell chain node")

    # Velocity
    for acc, velocity in _compute_velocities(df).items():
        if velocity > VELOCITY_THRESHOLD:
            points = min(MAX_VELOCITY_POINTS, math.floor(velocity * 2))
            _add(acc, points, f"High velocity ({_one_decimal(velocity)} tx/hr)")

    # Low activity
    for acc, count in tx_counts.items():
        if is_shell_count(count):
            _add(acc, WEIGHT_LOW_ACTIVITY, "Shell account (low tx count)")

    result = [
        {
            "account_id": acc_id,
            "score"     : min(MAX_SCORE, data["score"]),
            "reasons"   : data["reasons"],
        }
        for acc_id, data in account_data.items()
        if data["score"] > MIN_REPORTED_SCORE
    ]
    result.sort(key=lambda a: a["score"], reverse=True)   # stable: ties keep encounter order

    print(f"[scorer] Accounts scored: {len(account_data)} | Suspicious: {len(result)}")
    return result


# ─────────────────────────────────────────────────────────────────────────────
#  INTERNAL HELPERS
# ─────────────────────────────────────────────────────────────────────────────

def _compute_velocities(df: pd.DataFrame) -> dict[str, float]:
    """
    Outgoing transactions per hour between an account's first and last send.
    Only accounts with 2+ sends over a non-zero span get a value.
    """
    velocity = {}

    for acc, ts in df.groupby("sender_id", sort=False)["ts"]:
        if len(ts) < 2:
            continue

        span_hours = (ts.max() - ts.min()).total_seconds() / 3600
        if span_hours > 0:
            velocity[acc] = len(ts) / span_hours

    return velocity


def _one_decimal(value: float) -> str:
    """Half-up rounding on the exact float value, so 6.25 reads "6.3"."""
    return str(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
