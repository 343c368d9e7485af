#!/usr/bin/env python3
"""Look up the next Critical Mass ride around a coordinate.

Example::

    python scripts/next_ride.py 52.52 13.405 --radius 30 -v
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

import aiohttp  # noqa: E402

from pycriticalmaps import CriticalMapsConfig, CriticalMapsError, NextRideLocator  # noqa: E402
from pycriticalmaps._api.rides import RideApi  # noqa: E402
from pycriticalmaps._transport import HttpTransport  # noqa: E402
from pycriticalmaps.models import Coordinate  # noqa: E402


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("latitude", type=float)
    parser.add_argument("longitude", type=float)
    parser.add_argument("--radius", type=int, default=20, help="search radius in km (default: 20)")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> int:
    config = CriticalMapsConfig.from_env()
    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(session, timeout=config.request_timeout)
        locator = NextRideLocator(RideApi(transport, config.rides_url), radius_km=lambda: args.radius)
        try:
            ride = await locator.locate(Coordinate(args.latitude, args.longitude))
        except CriticalMapsError as exc:
            print(f"No ride: {exc}", file=sys.stderr)
            return 1
    print(ride.title_and_time)
    if ride.location:
        print(ride.location)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
