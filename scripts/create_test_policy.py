#!/usr/bin/env python3
"""
Send one signed policy-creation request straight to the partner insurance API.

Uses YAS_BASE_URL, YAS_PARTNER_ID and YAS_SECRET_KEY from the environment.

  python scripts/create_test_policy.py --branch "GOPENG GLAMPING PARK" --start 2024-06-01
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.integrations.insurance.client import InsuranceApiError, InsuranceConfigurationError, YasInsuranceClient
from src.integrations.insurance.request_builder import PolicyPhone, PolicyRequest, split_phone_number
from src.utils.config_loader import UnknownBranchError


async def run(args: argparse.Namespace) -> int:
    country_code, number = split_phone_number(args.phone)
    request = PolicyRequest(
        fullname=args.name,
        date_of_birth=args.dob,
        phone=PolicyPhone(country_code=country_code, number=number),
        email=args.email,
        nric=args.nric,
        nationality=args.nationality,
        branch=args.branch,
        coverage_start=args.start,
    )

    try:
        response = await YasInsuranceClient().create_policy(request)
    except (InsuranceConfigurationError, UnknownBranchError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except InsuranceApiError as e:
        print(f"API error {e.status_code}:", file=sys.stderr)
        print(e.body, file=sys.stderr)
        return 2

    print(json.dumps(response, indent=2))
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a test activity insurance policy")
    parser.add_argument("--branch", default="GOPENG GLAMPING PARK")
    parser.add_argument("--start", required=True, help="Coverage start date, YYYY-MM-DD")
    parser.add_argument("--name", default="Test Participant")
    parser.add_argument("--nric", default="900101-10-1234")
    parser.add_argument("--dob", default="1990-01-01")
    parser.add_argument("--nationality", default="MY", help="Two-letter nationality code")
    parser.add_argument("--phone", default="+60123456789")
    parser.add_argument("--email", default="test@example.com")
    return asyncio.run(run(parser.parse_args()))


if __name__ == "__main__":
    sys.exit(main())
