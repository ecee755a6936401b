# run.py
import json
import sys
import time

from forensics.engine import analyze
from forensics.loader import read_transactions_csv
from forensics.report import download_filename, get_download_json

# usage: python run.py transactions.csv [output.json]
csv_path    = sys.argv[1] if len(sys.argv) > 1 else "smart_dataset_10k.csv"
output_path = sys.argv[2] if len(sys.argv) > 2 else download_filename()

start = time.time()
transactions = read_transactions_csv(csv_path)
result = analyze(transactions, parallel=True)

# print summary
print(result["summary"])

# print top 20 suspicious accounts
for acc in result["suspicious_accounts"][:20]:
    print(acc)

# print all fraud rings
for ring in result["fraud_rings"]:
    print(ring)

# print the first few shell chains
for chain in result["shell_chains"][:10]:
    print(" → ".join(chain))

# save the downloadable report
with open(output_path, "w") as f:
    json.dump(get_download_json(result), f, indent=2)

print(f"\nDone. Check {output_path} for full results.")
end = time.time()
print(end - start)
