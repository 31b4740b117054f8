"""CLI entry point: python main.py list"""

import argparse
import asyncio
import sys

import config
from src.api_client import BackendError, TripManagerClient
from src.device import SimulatedPlatform
from src.logging_config import LogLevel, configure_logging
from src.notifications import NotificationCache, PushChannelCoordinator, TripReadyScanner
from src.storage import JsonFileStore, keys


def format_notification_table(records) -> str:
    """Format cached notifications as a text table."""
    if not records:
        return "No notifications."
    lines = [f"{'ID':>14}  {'':1}  {'Type':<24}  {'Created':<16}  Title", "-" * 80]
    for r in records:
        marker = " " if r.read else "*"
        created = r.created_at.astimezone().strftime("%Y-%m-%d %H:%M")
        lines.append(f"{r.id:>14}  {marker}  {r.type.value:<24}  {created:<16}  {r.title}")
    return "\n".join(lines)


async def run(args) -> int:
    store = JsonFileStore(config.STORAGE_PATH)
    notification_config = config.notification_config()

    if args.command == "login":
        await store.set_item(keys.AUTH_TOKEN, args.token)
        print("Auth token saved.")
        return 0

    async with TripManagerClient(store, config.api_config()) as client:
        platform = SimulatedPlatform()
        push = PushChannelCoordinator(platform, client, store, notification_config)
        cache = NotificationCache(client, store, push, notification_config)

        if args.command == "register-push":
            token = await push.register_for_push()
            if token is None:
                print("Push notifications unavailable on this device.")
                return 1
            print(f"Registered push token: {token} ({push.state.value})")
            return 0

        if args.command == "unregister-push":
            await push.unregister_push()
            print("Push token unregistered.")
            return 0

        if args.command == "logout":
            await push.unregister_push()
            await store.clear_auth_data()
            print("Logged out.")
            return 0

        if not await store.has_auth_token():
            print("Not logged in. Run: python main.py login TOKEN")
            return 1

        await cache.load()

        if args.command == "list":
            print(format_notification_table(cache.get_all()))
        elif args.command == "unread":
            count = await cache.get_unread_count_from_api()
            print(f"Unread notifications: {count}")
        elif args.command == "read":
            await cache.mark_as_read(args.id)
            print(f"Marked {args.id} as read.")
        elif args.command == "read-all":
            await cache.mark_all_as_read()
            print("All notifications marked as read.")
        elif args.command == "delete":
            await cache.delete_notification(args.id)
            print(f"Deleted {args.id}.")
        elif args.command == "scan":
            created = await TripReadyScanner(client, cache, notification_config).scan()
            print(f"Trip-ready notifications created: {created}")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="TripManager - notification client"
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Enable debug logging"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="Store an API bearer token")
    login.add_argument("token")
    sub.add_parser("logout", help="Unregister push and forget credentials")
    sub.add_parser("list", help="List notifications")
    sub.add_parser("unread", help="Show unread count")
    read = sub.add_parser("read", help="Mark one notification as read")
    read.add_argument("id", type=int)
    sub.add_parser("read-all", help="Mark every notification as read")
    delete = sub.add_parser("delete", help="Delete a notification")
    delete.add_argument("id", type=int)
    sub.add_parser("scan", help="Create notifications for trips starting today")
    sub.add_parser("register-push", help="Register this device for push")
    sub.add_parser("unregister-push", help="Unregister this device from push")
    args = parser.parse_args()

    logging_config = config.logging_config()
    if args.verbose:
        logging_config.level = LogLevel.DEBUG
    configure_logging(logging_config)

    try:
        return asyncio.run(run(args))
    except BackendError as e:
        print(f"Error: {e.user_message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
