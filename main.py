#!/usr/bin/env python3
"""
Boardbots gateway - browser front-end for the Boardbots game service.
"""

import argparse
import json
import logging
import sys

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", stream=sys.stderr
)

#
# NOTE: Keep gateway imports lazy (inside functions) so `--help` does not load grpc.
#


def check_users() -> int:
    """Load the fallback credential table and list its usernames."""
    from gateway.auth.config import load_gateway_config
    from gateway.auth.local import CredentialStore, CredentialStoreError

    cfg = load_gateway_config()
    store = CredentialStore(cfg.dev_users_file)
    try:
        records = store.load()
    except CredentialStoreError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    print(f"📋 {len(records)} fallback user(s) in {cfg.dev_users_file}:")
    for username in sorted(records):
        print(f"  - {username}")
    return 0


def fetch_game(game_id: str, token: str) -> int:
    """Query one game's state over gRPC and print it as JSON."""
    from gateway.auth.config import load_gateway_config
    from gateway.rpc.channel import RpcChannel
    from gateway.rpc.client import BoardbotsClient
    from gateway.rpc.interceptors import MetadataInterceptor
    from gateway.rpc.views import game_view

    cfg = load_gateway_config()
    client = BoardbotsClient(RpcChannel(cfg), timeout=cfg.rpc_timeout_seconds)
    result = client.get_games(game_id, interceptors=(MetadataInterceptor(token),))
    if not result.ok:
        print(f"❌ GetGames failed: {result.code} {result.error}", file=sys.stderr)
        return 1
    print(json.dumps(game_view(result.value).model_dump(mode="json"), indent=2))
    return 0


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Browser gateway for the Boardbots game service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve the gateway
  python main.py --serve --port 3000

  # Check the fallback credential table
  python main.py --check-users

  # Query a game directly over gRPC
  python main.py --game 6f1c... --token abc
        """,
    )
    parser.add_argument("--serve", action="store_true", help="Run the HTTP gateway")
    parser.add_argument("--host", default="0.0.0.0", help="Gateway bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=3000, help="Gateway listen port (default: 3000)")
    parser.add_argument(
        "--check-users", action="store_true", help="List usernames in the fallback credential table (DEV_USERS_FILE)"
    )
    parser.add_argument("--game", metavar="ID", help="Fetch game state by id over gRPC")
    parser.add_argument("--token", default="", help="Token attached to the --game call metadata")

    args = parser.parse_args()

    if args.check_users:
        sys.exit(check_users())

    if args.game:
        sys.exit(fetch_game(args.game, args.token))

    if args.serve:
        from gateway.api.app import run

        run(host=args.host, port=args.port)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
