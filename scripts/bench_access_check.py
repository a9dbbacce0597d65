#!/usr/bin/env python3
"""Benchmark permission checks: latency (p50, p95, p99) and QPS.

Usage:
  export API_URL=http://localhost:8000 KEYCLOAK_URL=... BENCH_OPERATION_ID=...
  python scripts/bench_access_check.py [--num-checks 500] [--module orders --action edit]

The benchmark user should hold a grant on BENCH_OPERATION_ID; denials are
counted separately from transport errors.
"""
from __future__ import annotations

import argparse
import os
import statistics
import sys
import time

import httpx


def get_token(
    keycloak_url: str,
    realm: str,
    client_id: str,
    client_secret: str,
    username: str,
    password: str,
) -> str:
    url = f"{keycloak_url.rstrip('/')}/realms/{realm}/protocol/openid-connect/token"
    r = httpx.post(
        url,
        data={
            "grant_type": "password",
            "client_id": client_id,
            "client_secret": client_secret,
            "username": username,
            "password": password,
        },
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        timeout=30.0,
    )
    r.raise_for_status()
    return r.json()["access_token"]


def _percentile(sorted_ms: list[float], q: float) -> float:
    return sorted_ms[max(int(len(sorted_ms) * q) - 1, 0)]


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark access checks")
    parser.add_argument("--num-checks", type=int, default=200, help="Number of check requests")
    parser.add_argument("--module", type=str, default="orders")
    parser.add_argument("--action", type=str, default="view")
    parser.add_argument("--output", type=str, default="/results/bench_access_check.txt", help="Output file path")
    args = parser.parse_args()

    api_url = os.environ.get("API_URL", "http://localhost:8000").rstrip("/")
    keycloak_url = os.environ.get("KEYCLOAK_URL", "http://localhost:8080")
    realm = os.environ.get("KEYCLOAK_REALM", "opauthz")
    client_id = os.environ.get("KEYCLOAK_CLIENT_ID", "opauthz-api")
    client_secret = os.environ.get("KEYCLOAK_CLIENT_SECRET", "")
    user = os.environ.get("BENCH_USER", "testuser")
    password = os.environ.get("BENCH_PASSWORD", "testpass")
    operation_id = os.environ.get("BENCH_OPERATION_ID", "bench-operation")

    print("Getting token...")
    token = get_token(keycloak_url, realm, client_id, client_secret, user, password)
    headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
    payload = {"operation_id": operation_id, "module": args.module, "action": args.action}

    latencies: list[float] = []
    denied = 0
    errors = 0
    print(f"Running {args.num_checks} access checks...")
    start_total = time.perf_counter()
    with httpx.Client(timeout=30.0) as client:
        for _ in range(args.num_checks):
            t0 = time.perf_counter()
            r = client.post(f"{api_url}/v1/access/check", json=payload, headers=headers)
            elapsed = time.perf_counter() - t0
            if r.status_code in (200, 403):
                latencies.append(elapsed)
                denied += r.status_code == 403
            else:
                errors += 1
    total_elapsed = time.perf_counter() - start_total

    n = len(latencies)
    if n == 0:
        print("No successful checks.")
        return 1

    ms = sorted(x * 1000 for x in latencies)
    summary = (
        f"Access check benchmark ({args.module}.{args.action}, checks={n}, "
        f"denied={denied}, errors={errors})\n"
        f"  QPS: {n / total_elapsed:.2f}\n"
        f"  Latency: p50={statistics.median(ms):.1f} ms, "
        f"p95={_percentile(ms, 0.95):.1f} ms, p99={_percentile(ms, 0.99):.1f} ms\n"
        f"  Total time: {total_elapsed:.2f} s\n"
    )
    print(summary)

    try:
        os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(summary)
        print(f"Wrote {args.output}")
    except OSError:
        pass

    return 0


if __name__ == "__main__":
    sys.exit(main())
