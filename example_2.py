from JsonToCSV import JsonNormalizer, CsvTableWriter
import os

output_dir = "output"
os.makedirs(output_dir, exist_ok=True)

with open("example.json", "r") as f:
    json_text = f.read()

# Step 1: Normalize JSON data into relational tables (rows are buffered)
session = JsonNormalizer.normalize_json_to_tables(
    json_text, entity_aliases=[("billing_address", "shipping_address")]
)

for table in session.live_tables():
    print(f"{table.name}: {', '.join(table.columns)} ({len(table.rows)} rows)")

# Step 2: Write every table in one go
with CsvTableWriter(output_dir, streaming=False) as writer:
    writer.write_tables(session.live_tables())
