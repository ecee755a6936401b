"""
smurfing_detector.py
Detects smurfing patterns: unusual aggregation or dispersal of funds.

  Fan-in  : 10+ different senders → 1 receiver within 72 hours
  Fan-out : 1 sender → 10+ different receivers within 72 hours

Works on the transaction table, not the graph. Each hub's transactions are
sorted by time and a 72-hour window is anchored at every transaction in turn
(both bounds inclusive). The first window that reaches the threshold becomes
the hub's only cluster.
"""

import pandas as pd
from datetime import timedelta

# ── Tuneable thresholds ───────────────────────────────────────────────────────
SMURF_THRESHOLD     = 10      # min unique counterparties within the window
TIME_WINDOW_HOURS   = 72      # the sliding window size


def detect_smurfing(df: pd.DataFrame) -> dict:
    """
    Returns:
    {
        "fanIn" : [{"receiver": "ACC_HUB", "senders": [...], "count": 12}, ...],
        "fanOut": [{"sender":   "ACC_HUB", "receivers": [...], "count": 10}, ...],
    }
    Hubs are listed in order of their first transaction in the input.
    """

    fan_in = [
        {"receiver": hub, "senders": counterparties, "count": len(counterparties)}
        for hub, counterparties in _scan_hubs(df, hub_col="receiver_id", counterpart_col="sender_id")
    ]

    fan_out = [
        {"sender": hub, "receivers": counterparties, "count": len(counterparties)}
        for hub, counterparties in _scan_hubs(df, hub_col="sender_id", counterpart_col="receiver_id")
    ]

    print(f"[smurfing_detector] Fan-in hubs: {len(fan_in)} | Fan-out hubs: {len(fan_out)}")
    return {"fanIn": fan_in, "fanOut": fan_out}


# ─────────────────────────────────────────────────────────────────────────────
#  INTERNAL HELPERS
# ─────────────────────────────────────────────────────────────────────────────

def _scan_hubs(df: pd.DataFrame, hub_col: str, counterpart_col: str) -> list[tuple[str, list[str]]]:
    """Runs the sliding-window check once per hub account."""

    hubs = []

    for hub, group in df.groupby(hub_col, sort=False):
        counterparties = _first_burst(group, counterpart_col)
        if counterparties is not None:
            hubs.append((hub, counterparties))

    return hubs


def _first_burst(group: pd.DataFrame, counterpart_col: str) -> list[str] | None:
    """
    Slides the window start over every transaction of one hub (oldest first)
    and returns the distinct counterparties of the first window holding at
    least SMURF_THRESHOLD of them, in time order. None if no window qualifies.
    """

    # Too few counterparties overall, no window can qualify
    if group[counterpart_col].nunique() < SMURF_THRESHOLD:
        return None

    group       = group.sort_values("ts", kind="stable")
    timestamps  = group["ts"]
    window_size = timedelta(hours=TIME_WINDOW_HOURS)

    for window_start in timestamps:
        window_end = window_start + window_size

        in_window = timestamps.between(window_start, window_end, inclusive="both")
        unique_counterparties = group.loc[in_window, counterpart_col].unique()

        if len(unique_counterparties) >= SMURF_THRESHOLD:
            return [str(acc) for acc in unique_counterparties]

    return None
