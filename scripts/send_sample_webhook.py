#!/usr/bin/env python3
"""
Post a sample indemnity form submission to a running API.

Start the API first (in another terminal):
  uvicorn src.api.main:app --host 127.0.0.1 --port 8000

Then run this script:
  python scripts/send_sample_webhook.py
  python scripts/send_sample_webhook.py --branch "BOTANI" --nationality "Singaporean (SG)"
"""

from __future__ import annotations

import argparse
import json
import sys
import uuid
from typing import Any, Dict, List

import requests


def field(label: str, value: Any, options: List[Dict[str, str]] = None) -> Dict[str, Any]:
    out: Dict[str, Any] = {"key": f"question_{label}", "label": label, "type": "INPUT_TEXT", "value": value}
    if options:
        out["options"] = options
    return out


def sample_payload(branch: str, nationality: str, age: str) -> Dict[str, Any]:
    nationality_options = [{"id": "nat-1", "text": nationality}]
    return {
        "eventId": str(uuid.uuid4()),
        "eventType": "FORM_RESPONSE",
        "data": {
            "submissionId": f"sample-{uuid.uuid4().hex[:8]}",
            "respondentId": f"resp-{uuid.uuid4().hex[:8]}",
            "fields": [
                field("BRANCH", branch),
                field("groupname", "Sample Group"),
                field("fullname", "Jane Tan"),
                field("age", age),
                field("dob", "2015-01-01"),
                field("nric", "150101-10-1234"),
                field("nationality", ["nat-1"], nationality_options),
                field("phonenumber", "+60198765432"),
                field("email", "jane@example.com"),
                field("guardianname", "Tan Ah Kow"),
                field("guardiannric", "800101-10-5555"),
                field("guardianemail", "guardian@example.com"),
                field("guardianphone", "+60123456789"),
                field("guardiansignature", [{"url": "https://example.com/signature.png"}]),
                field("activity1", "ATV"),
                field("activitydate1", "2024-06-01"),
                field("actime1", "10:00"),
            ],
        },
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Send a sample indemnity webhook")
    parser.add_argument("--base-url", default="http://localhost:8000", help="API base URL")
    parser.add_argument("--branch", default="GOPENG GLAMPING PARK")
    parser.add_argument("--nationality", default="Malaysian (MY)")
    parser.add_argument("--age", default="10")
    args = parser.parse_args()

    url = f"{args.base_url.rstrip('/')}/api/tally-to-supabase"
    payload = sample_payload(args.branch, args.nationality, args.age)
    print(f"POST {url}")
    try:
        r = requests.post(url, json=payload, timeout=30)
    except requests.RequestException as e:
        print(f"FAIL: {e}")
        return 1

    print(f"Status: {r.status_code}")
    print(json.dumps(r.json(), indent=2))
    return 0 if r.ok else 1


if __name__ == "__main__":
    sys.exit(main())
