"""
Manage a back-office API session from the command line.

Credentials are kept in the token file (TOKEN_FILE), or in the database when
TOKEN_DATABASE_URL is set, so a login survives between runs and every later
command reuses, and if needed refreshes, it.

Usage:
    python -m vehicleprep.scripts.session login EMAIL [--password PASSWORD]
    python -m vehicleprep.scripts.session logout
    python -m vehicleprep.scripts.session whoami
    python -m vehicleprep.scripts.session health
    python -m vehicleprep.scripts.session check-conflicts USER AGENCY DATE START END [--exclude ID]

Options:
    --password: Password for login (prompted when omitted)
    --exclude: Schedule id to ignore when checking conflicts (editing an existing shift)
"""

import argparse
import getpass
import json
import sys
from typing import List, Optional

import requests

from vehicleprep.admin.schedules import SchedulesAPI
from vehicleprep.api.client import ApiClient, token_store_from_config
from vehicleprep.api.exceptions import AuthError
from vehicleprep.api.request import handle_api_error
from vehicleprep.auth.api import AuthAPI
from vehicleprep.auth.utils import check_server_health
from vehicleprep.config import get_config
from vehicleprep.logging_config import configure_logging


def build_client(config_class=None) -> ApiClient:
    config_class = config_class or get_config()
    # No browser to redirect: an expired session just ends the command
    return ApiClient(
        token_store=token_store_from_config(config_class),
        config_class=config_class,
        on_session_expired=lambda: print("Session expired, run `login` again.", file=sys.stderr),
    )


def cmd_login(client: ApiClient, args) -> bool:
    password = args.password or getpass.getpass("Password: ")
    result = AuthAPI(client).login(args.email, password)
    if not result.success:
        print(f"Login failed: {result.message or 'invalid credentials'}", file=sys.stderr)
        return False
    user = (result.data or {}).get("user") or {}
    print(f"Logged in as {user.get('email', args.email)}")
    return True


def cmd_logout(client: ApiClient, args) -> bool:
    AuthAPI(client).logout()
    print("Logged out")
    return True


def cmd_whoami(client: ApiClient, args) -> bool:
    if not client.token_store.get_access_token():
        print("Not logged in", file=sys.stderr)
        return False
    result = AuthAPI(client).get_profile()
    if not result.success:
        print(result.message or "Could not read profile", file=sys.stderr)
        return False
    print(json.dumps(result.data, indent=2, default=str))
    return True


def cmd_health(client: ApiClient, args) -> bool:
    healthy = check_server_health(client)
    print(f"{client.base_url}: {'up' if healthy else 'DOWN'}")
    return healthy


def cmd_check_conflicts(client: ApiClient, args) -> bool:
    result = SchedulesAPI(client).check_conflicts(
        args.user_id, args.agency_id, args.date, args.start_time, args.end_time, exclude_id=args.exclude,
    )
    print(json.dumps(result.data, indent=2, default=str))
    return result.success


COMMANDS = {
    "login": cmd_login,
    "logout": cmd_logout,
    "whoami": cmd_whoami,
    "health": cmd_health,
    "check-conflicts": cmd_check_conflicts,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage a back-office API session.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    login = subparsers.add_parser("login", help="Authenticate and store the tokens")
    login.add_argument("email")
    login.add_argument("--password", help="Password (prompted when omitted)")

    subparsers.add_parser("logout", help="End the session and wipe stored credentials")
    subparsers.add_parser("whoami", help="Show the profile of the stored session")
    subparsers.add_parser("health", help="Check that the API answers")

    conflicts = subparsers.add_parser("check-conflicts", help="Check a prospective shift for overlaps")
    conflicts.add_argument("user_id")
    conflicts.add_argument("agency_id")
    conflicts.add_argument("date", help="YYYY-MM-DD")
    conflicts.add_argument("start_time", help="HH:MM")
    conflicts.add_argument("end_time", help="HH:MM")
    conflicts.add_argument("--exclude", help="Schedule id to ignore")
    return parser


def main(argv: Optional[List[str]] = None, client: Optional[ApiClient] = None) -> int:
    args = build_parser().parse_args(argv)
    config_class = get_config()
    configure_logging(log_level=config_class.LOG_LEVEL, log_file=config_class.LOG_FILE)
    client = client or build_client(config_class)
    try:
        return 0 if COMMANDS[args.command](client, args) else 1
    except (requests.RequestException, AuthError) as e:
        print(f"Error: {handle_api_error(e)}", file=sys.stderr)
        return 1
    finally:
        client.close()


if __name__ == "__main__":
    sys.exit(main())
