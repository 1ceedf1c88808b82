"""
Command-line entry point: ask a question and print the response as JSON.
"""

import argparse
import asyncio
import json
import sys

from .api.ask import handle_ask_request
from .core.logging_config import configure_logging


def main(argv=None) -> int:
    """
    Main entry point for the vxa-ask command.

    Returns:
        0 on success, 1 for anything other than a 200 response
    """
    parser = argparse.ArgumentParser(description="Ask a question about your pipeline, candidates or competitors")
    parser.add_argument("query", nargs="+", help="The question to ask")
    parser.add_argument("--classify-only", action="store_true",
                        help="Print the classified intent and filters without querying the store")
    parser.add_argument("--log-level", default="ERROR", help="Log level (default: ERROR)")

    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    query = " ".join(args.query)

    if args.classify_only:
        from .insights.intents import classify_intent
        print(json.dumps(classify_intent(query).to_dict(), indent=2))
        return 0

    status, payload = asyncio.run(handle_ask_request({"query": query}))
    print(json.dumps(payload, indent=2))
    return 0 if status == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
