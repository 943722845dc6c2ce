"""Link the caller phone number to the outbound Retell agent.

Retell rejects outbound calls from numbers without an outbound agent; run this
once after buying or reassigning a number:

    retell-link-phone --phone +13137662804 --agent-id agent_123
"""

import argparse
import asyncio
import logging
import sys

import httpx

from app.config import Settings
from app.exceptions.custom import ConfigurationError, NetworkError, RetellError
from app.services.retell import RetellService

logger = logging.getLogger(__name__)


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--phone", default=settings.retell_from_number, help="caller number (RETELL_FROM_NUMBER)")
    parser.add_argument("--agent-id", default=settings.retell_agent_id, help="agent id (RETELL_AGENT_ID)")
    return parser


async def link(settings: Settings, phone: str, agent_id: str) -> str:
    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
        retell = RetellService(
            client,
            settings.retell_api_key,
            base_url=settings.retell_api_base_url,
            country_code=settings.default_country_code,
        )
        return await retell.link_phone_number(phone, agent_id)


def main(argv: list[str] | None = None) -> int:
    settings = Settings()
    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(message)s")
    args = build_parser(settings).parse_args(argv)

    if not args.phone:
        print("RETELL_FROM_NUMBER is not set; pass --phone or add it to .env", file=sys.stderr)
        return 1
    if not args.agent_id:
        print("RETELL_AGENT_ID is not set; pass --agent-id or add it to .env", file=sys.stderr)
        return 1

    print(f"Linking {args.phone} to agent {args.agent_id}...")
    try:
        number = asyncio.run(link(settings, args.phone, args.agent_id))
    except (ConfigurationError, NetworkError, RetellError) as exc:
        print(f"Error linking phone number to agent: {exc}", file=sys.stderr)
        print(
            "Alternative: link them manually in the Retell Dashboard:\n"
            "  1. Go to https://retellai.com → Phone Numbers\n"
            f"  2. Click on phone number: {args.phone}\n"
            "  3. Set 'Outbound Agent' to your agent\n"
            "  4. Save",
            file=sys.stderr,
        )
        return 1

    print(f"Phone number {number} is now linked to agent {args.agent_id} for outbound calls.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
