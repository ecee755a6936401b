import json
import random
from datetime import datetime, timedelta

import pandas as pd

# --- Configuration ---
NUM_TRANSACTIONS = 10000
START_DATE = datetime(2026, 2, 1)

# 1. Generate a pool of realistic, anonymous Account IDs (e.g., ACC_54921)
all_ids = [f"ACC_{n}" for n in random.sample(range(10000, 99999), 5000)]
random.shuffle(all_ids)

# 2. Allocate IDs for different behaviors secretly
regular_users = all_ids[:4000]
mule_pool = all_ids[4000:]  # Reserved for fraud patterns

transactions = []
tx_counter = 1

# This dictionary keeps track of the "answers" so you can grade the engine
ground_truth = {"fraud_rings": [], "fan_in": [], "fan_out": [], "shell_chains": []}


def add_tx(sender, receiver, amount, timestamp):
    global tx_counter
    transactions.append([
        f"TX_{tx_counter:07d}", sender, receiver,
        round(amount, 2), timestamp.strftime("%Y-%m-%d %H:%M:%S")
    ])
    tx_counter += 1


def random_date():
    return START_DATE + timedelta(days=random.randint(0, 20), minutes=random.randint(0, 1440))


def take_mules(n):
    global mule_idx
    accounts = mule_pool[mule_idx:mule_idx + n]
    mule_idx += n
    return accounts


mule_idx = 0

# --- GENERATION PHASE ---

# A. Innocent Noise (Regular P2P Transfers)
for _ in range(7000):
    sender, receiver = random.sample(regular_users, 2)
    add_tx(sender, receiver, random.uniform(10, 5000), random_date())

# B. Circular Routing (3 to 5 Hops)
for i in range(25):
    cycle_nodes = take_mules(random.randint(3, 5))
    amount = random.uniform(25000, 150000)
    base_time = random_date()

    for j, sender in enumerate(cycle_nodes):
        receiver = cycle_nodes[(j + 1) % len(cycle_nodes)]
        # Transactions happen in rapid succession (every 30 mins)
        add_tx(sender, receiver, amount, base_time + timedelta(minutes=j * 30))
        amount *= random.uniform(0.95, 0.99)  # 1-5% fee dropped at each hop

    ground_truth["fraud_rings"].append(sorted(cycle_nodes))

# C. Fan-In Smurfing: 12-20 small deposits into one collector within a day
for i in range(10):
    collector, *depositors = take_mules(random.randint(13, 21))
    base_time = random_date()
    for j, depositor in enumerate(depositors):
        add_tx(depositor, collector, random.uniform(8000, 9500), base_time + timedelta(minutes=j * 40))
    ground_truth["fan_in"].append({"receiver": collector, "senders": depositors})

# D. Fan-Out Smurfing: one distributor to 15-25 receivers, minutes apart
for i in range(15):
    distributor, *receivers = take_mules(random.randint(16, 26))
    base_time = random_date()
    for j, receiver in enumerate(receivers):
        add_tx(distributor, receiver, random.uniform(8000, 9500), base_time + timedelta(minutes=j * 5))
    ground_truth["fan_out"].append({"sender": distributor, "receivers": receivers})

# E. Shell Chains: origin → 2-4 single-use relays → destination
for i in range(20):
    chain = take_mules(random.randint(4, 6))
    amount = random.uniform(20000, 60000)
    base_time = random_date()
    for j in range(len(chain) - 1):
        add_tx(chain[j], chain[j + 1], amount, base_time + timedelta(hours=j * 6))
        amount *= random.uniform(0.97, 0.995)
    ground_truth["shell_chains"].append(chain)

# F. Fill remainder with noise to hit exactly 10,000 transactions
while len(transactions) < NUM_TRANSACTIONS:
    sender, receiver = random.sample(regular_users, 2)
    add_tx(sender, receiver, random.uniform(10, 5000), random_date())

# --- EXPORT PHASE ---

# 1. Shuffle heavily so patterns aren't just sequential blocks in the CSV
random.shuffle(transactions)
transactions = transactions[:NUM_TRANSACTIONS]

# 2. Save the blinded CSV for the engine
df = pd.DataFrame(transactions, columns=["transaction_id", "sender_id", "receiver_id", "amount", "timestamp"])
df.to_csv("smart_dataset_10k.csv", index=False)

# 3. Save the Answer Key so you can grade the engine
with open("ground_truth_key.json", "w") as f:
    json.dump(ground_truth, f, indent=4)

print("✅ Created smart_dataset_10k.csv (Feed this to run.py)")
