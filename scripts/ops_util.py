#!/usr/bin/env python3
"""
Operations utilities - CLI client for a running librarian server.
"""

import argparse
import json
import os
import sys

import requests

DEFAULT_BASE_URL = os.getenv("LIBRARIAN_API_URL", "http://127.0.0.1:8000")


def _print_json(payload):
    print(json.dumps(payload, indent=2))


def status_command(args):
    """Show recommendation index status."""
    response = requests.get(f"{args.base_url}/api/chatbot/status", timeout=args.timeout)
    if response.status_code != 200:
        print(f"❌ Status request failed ({response.status_code})")
        _print_json(response.json())
        return 1

    data = response.json()["data"]
    print(f"State:           {data['state']}")
    print(f"Initialized:     {data['is_initialized']}")
    print(f"Real embeddings: {data['uses_real_embeddings']}")
    print(f"Provider:        {data['embedding_provider']}")
    print(f"Books indexed:   {data['book_count']}")
    print(f"Stored vectors:  {data['store']['total_embeddings']} ({data['store']['storage_path']})")
    return 0


def refresh_command(args):
    """Re-embed the catalog on the running server."""
    print("Refreshing recommendation index (this re-embeds every book)...")
    response = requests.post(f"{args.base_url}/api/chatbot/refresh-index", timeout=args.timeout)
    body = response.json()
    if response.status_code != 200:
        print(f"❌ Refresh failed ({response.status_code}): {body.get('message')}")
        return 1

    print(f"✓ {body['message']}")
    return 0


def ask_command(args):
    """Send one chat message and print the reply."""
    response = requests.post(
        f"{args.base_url}/api/chatbot/recommend",
        json={"message": args.message},
        timeout=args.timeout
    )
    body = response.json()
    if response.status_code != 200:
        print(f"❌ Request failed ({response.status_code}): {body.get('message')}")
        return 1

    data = body["data"]
    print(data["response"])
    for book in data["books"]:
        print(f"  - {book['title']} by {book['author']} ({book['similarity']:.2f})")
    return 0


def main():
    """Main CLI entry point for operations utilities."""
    parser = argparse.ArgumentParser(
        description="Librarian Operations CLI Utilities",
        prog="python scripts/ops_util.py"
    )
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL, help=f"Server URL (default: {DEFAULT_BASE_URL})")
    parser.add_argument("--timeout", type=float, default=600.0, help="Request timeout in seconds")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    status_parser = subparsers.add_parser("status", help="Show index status")
    status_parser.set_defaults(func=status_command)

    refresh_parser = subparsers.add_parser("refresh", help="Rebuild the index on the server")
    refresh_parser.set_defaults(func=refresh_command)

    ask_parser = subparsers.add_parser("ask", help="Send a chat message")
    ask_parser.add_argument("message", help="Message for the librarian")
    ask_parser.set_defaults(func=ask_command)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        sys.exit(args.func(args))
    except requests.RequestException as e:
        print(f"❌ Could not reach {args.base_url}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
