#!/usr/bin/env python3
import argparse
import json
import os
import random

SENSORS = [
    ("rain", "mm"),
    ("temperature", "C"),
    ("humidity", "%"),
    ("wind", "m/s"),
]


def make_record(rng: random.Random, value_key: str) -> dict:
    name, unit = rng.choice(SENSORS)
    value = rng.randint(0, 50) if unit == "%" else round(rng.uniform(0.0, 40.0), 2)
    return {
        name: {value_key: value, "unit": unit, "status": "ok"},
        "station": f"st_{rng.randint(1, 99):03d}",
    }


def main():
    ap = argparse.ArgumentParser(description="Write a sample data file for telemetry-pusher")
    ap.add_argument("--out", default="data.json")
    ap.add_argument("--records", type=int, default=5)
    ap.add_argument("--random-key", default="value", help="field randomized before each send ('' to disable)")
    ap.add_argument("--bare", action="store_true", help="write a bare array instead of the wrapped object")
    ap.add_argument("--seed", type=int, default=42)
    args = ap.parse_args()

    if args.records < 1:
        ap.error("--records must be >= 1")

    rng = random.Random(args.seed)
    value_key = args.random_key or "value"
    records = [make_record(rng, value_key) for _ in range(args.records)]

    doc = records if args.bare else {"random_key": args.random_key, "data": records}

    out_dir = os.path.dirname(os.path.abspath(args.out))
    os.makedirs(out_dir, exist_ok=True)
    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(doc, f, ensure_ascii=False, indent=2)

    print(f"Wrote {args.out} ({len(records)} records)")


if __name__ == "__main__":
    main()
