"""Demo data for development.

The API seeds itself on startup when ``SEED_DEMO_DATA`` is set and the store is empty.
To seed an already running server over HTTP:

    python -m event_approval.seed [base_url]
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import TYPE_CHECKING, Any

import httpx

from event_approval.services.identity import DEMO_APPROVER, DEMO_EMPLOYEE

if TYPE_CHECKING:
    from event_approval.services.identity import InMemoryIdentityService
    from event_approval.services.lifecycle import LifecycleService

logger = logging.getLogger(__name__)

BASE_URL = "http://localhost:8000"

DEMO_REQUESTS: list[dict[str, Any]] = [
    {
        "event_name": "Global Engineering Summit",
        "event_website": "https://events.contoso.example/summit",
        "role": "speaker",
        "transportation_mode": "air",
        "origin": "Redmond",
        "destination": "Berlin",
        "cost_estimate": {
            "registration": 499,
            "travel": 1200,
            "hotels": 850,
            "meals": 280,
            "other": 100,
            "currency_code": "USD",
            "total": 2929,
        },
    },
    {
        "event_name": "Cloud Architecture Expo",
        "event_website": "https://events.fabrikam.example/cloud-expo",
        "role": "organizer",
        "transportation_mode": "rail",
        "origin": "Paris",
        "destination": "Amsterdam",
        "cost_estimate": {
            "registration": 350,
            "travel": 200,
            "hotels": 420,
            "meals": 150,
            "other": 80,
            "currency_code": "EUR",
            "total": 1200,
        },
    },
]

# Index into DEMO_REQUESTS -> decision applied after submission.
DEMO_DECISIONS: dict[int, dict[str, Any]] = {
    1: {
        "decision_type": "approved",
        "comment": "Approved for strategic customer alignment.",
        "expected_version": 1,
    },
}


def seed_identities(identity: InMemoryIdentityService) -> None:
    identity.seed(DEMO_EMPLOYEE)
    identity.seed(DEMO_APPROVER)


async def seed_demo_data(lifecycle: LifecycleService) -> bool:
    """Create the demo requests in-process. Returns False if the store already holds requests."""
    summary = await lifecycle.get_dashboard_summary()
    if summary.total:
        logger.info("Store already holds %d requests, skipping demo seed", summary.total)
        return False

    for index, payload in enumerate(DEMO_REQUESTS):
        created = await lifecycle.submit_request(DEMO_EMPLOYEE, payload)
        if index in DEMO_DECISIONS:
            await lifecycle.decide(DEMO_APPROVER, created.id, DEMO_DECISIONS[index])
    logger.info("Seeded %d demo requests", len(DEMO_REQUESTS))
    return True


async def seed_over_http(base_url: str = BASE_URL) -> None:
    """Submit the demo requests to a running server."""
    async with httpx.AsyncClient(base_url=base_url, timeout=10.0) as client:
        for index, payload in enumerate(DEMO_REQUESTS):
            resp = await client.post("/requests", json=payload, headers={"X-User-Id": DEMO_EMPLOYEE.id})
            resp.raise_for_status()
            created = resp.json()
            print(f"  Created {created['request_number']} {created['event_name']}")
            if index in DEMO_DECISIONS:
                resp = await client.post(
                    f"/requests/{created['id']}/decision",
                    json=DEMO_DECISIONS[index],
                    headers={"X-User-Id": DEMO_APPROVER.id},
                )
                resp.raise_for_status()
                print(f"  {DEMO_DECISIONS[index]['decision_type'].capitalize()} {created['request_number']}")


def main() -> None:
    base_url = sys.argv[1] if len(sys.argv) > 1 else BASE_URL
    print(f"Seeding demo data at {base_url}")
    try:
        asyncio.run(seed_over_http(base_url))
    except httpx.HTTPError as exc:
        print(f"Seeding failed: {exc}", file=sys.stderr)
        sys.exit(1)
    print("Done.")


if __name__ == "__main__":
    main()
