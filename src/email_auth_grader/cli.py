import argparse
import asyncio
import json
import logging
import os
import sys

from dotenv import load_dotenv

from .core import check, human_report


def main(argv=None):
    load_dotenv()
    parser = argparse.ArgumentParser(description="Grade a domain's email auth records (SPF/DKIM/DMARC)")
    parser.add_argument("domain", help="domain to check (e.g. example.com)")
    parser.add_argument("--json-out", help="Write the JSON report to this file")
    parser.add_argument("--quiet", action="store_true", help="Only output JSON")
    parser.add_argument("--verbose", action="store_true", help="Log DNS lookups and failures")
    args = parser.parse_args(argv)

    level = "DEBUG" if args.verbose else os.environ.get("EMAIL_AUTH_LOG_LEVEL", "WARNING")
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        status, result = asyncio.run(check(args.domain))
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        sys.exit(2)

    if status != 200:
        print(f"Error: {result['error']}", file=sys.stderr)
        sys.exit(2)

    if args.json_out:
        with open(args.json_out, "w", encoding="utf-8") as f:
            json.dump(result, f, indent=2)
        if not args.quiet:
            print(f"Wrote JSON report to {args.json_out}")

    if not args.quiet:
        print(human_report(result))
    else:
        print(json.dumps(result))


if __name__ == "__main__":
    main()
