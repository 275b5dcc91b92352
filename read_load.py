"""
read_load.py - simple async load script to follow short URLs

Usage:
  python read_load.py --base http://127.0.0.1:3000 --in codes_created.jsonl --count 15000 --concurrency 200

Each request hits GET /s/{code} without following the redirect; a 303 counts
as success. Per-code hit totals are then checked against GET /stats/{code}.
"""
import argparse
import asyncio
import json
import random
import time
from collections import Counter
from datetime import datetime, timezone

import httpx

def _now_iso():
    return datetime.now(timezone.utc).isoformat()

def _load_codes(path):
    codes = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            c = json.loads(line).get("code")
            if c:
                codes.append(c)
    return codes

async def _hit_one(client: httpx.AsyncClient, base: str, code: str):
    try:
        r = await client.get(f"{base}/s/{code}", follow_redirects=False, timeout=10)
        return r.status_code == 303
    except httpx.HTTPError:
        return False

async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://127.0.0.1:3000")
    parser.add_argument("--in", dest="codes_file", default="codes_created.jsonl")
    parser.add_argument("--count", type=int, default=15000)
    parser.add_argument("--concurrency", type=int, default=200)
    args = parser.parse_args()

    codes = _load_codes(args.codes_file)
    if not codes:
        print(f"No codes found in {args.codes_file}. Run write_load.py first.")
        return

    start_iso = _now_iso()
    t0 = time.perf_counter()
    success = 0
    sent = Counter()

    limit = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)
    async with httpx.AsyncClient(limits=limit) as client:
        sem = asyncio.Semaphore(args.concurrency)

        async def _task(i):
            nonlocal success
            code = random.choice(codes)
            async with sem:
                ok = await _hit_one(client, args.base, code)
                if ok:
                    success += 1
                    sent[code] += 1

        await asyncio.gather(*(_task(i) for i in range(args.count)))

        # Spot-check that the server counted at least what we sent.
        sample = random.sample(list(sent), min(10, len(sent)))
        short = 0
        for code in sample:
            r = await client.get(f"{args.base}/stats/{code}", timeout=10)
            if r.status_code != 200 or r.json()["hits"] < sent[code]:
                short += 1

    dt = time.perf_counter() - t0
    end_iso = _now_iso()
    print(f"START: {start_iso}")
    print(f"END:   {end_iso}")
    print(f"TOTAL: {dt:.3f} s")
    print(f"OPS:   reads={args.count}, ok={success}, fail={args.count - success}")
    print(f"STATS: {len(sample) - short}/{len(sample)} sampled codes report all hits")
    if dt > 0:
        print(f"RPS:   {success/dt:.1f} req/s")

if __name__ == "__main__":
    asyncio.run(main())
