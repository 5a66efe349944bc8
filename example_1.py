import json
import os
from JsonToCSV import process_json_to_csv

# Load your JSON data
with open("example.json", "r") as f:
    json_data = json.load(f)

output_dir = "output"
os.makedirs(output_dir, exist_ok=True)

# Basic Example: Convert JSON to CSV tables in one step
table_names, errors = process_json_to_csv(json_data, output_dir)

print(f"Wrote tables: {', '.join(table_names)}")
for table_name, message in errors:
    print(f"Skipped {table_name}: {message}")
