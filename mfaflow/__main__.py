"""Command-line entry point for running MFA flows against an authority."""

from __future__ import annotations

import argparse
import logging
import sys

from . import AuthPurpose, AuthType, MFAClient, MFAError, MFASettings
from .models import DeviceInfo


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="MFA authenticator flows")
    parser.add_argument("--authority", help="Authority base URL (overrides MFAFLOW_AUTHORITY_URL)")
    parser.add_argument("--email", help="Account email the flow is for")
    commands = parser.add_subparsers(dest="command", required=True)

    register = commands.add_parser("register", help="Register a new authenticator")
    register.add_argument("--type", required=True, choices=[t.value for t in AuthType])
    register.add_argument(
        "--purpose",
        action="append",
        choices=[p.value for p in AuthPurpose],
        help="Purpose the authenticator may be used for (repeatable)",
    )

    platform = commands.add_parser("register-platform", help="Register this device's biometric key")
    platform.add_argument("--purpose", action="append", choices=[p.value for p in AuthPurpose])

    auth = commands.add_parser("auth", help="Obtain an auth token")
    auth.add_argument("--purpose", required=True, choices=[p.value for p in AuthPurpose])
    auth.add_argument("--type", choices=[t.value for t in AuthType])
    auth.add_argument("--authenticator-id")
    auth.add_argument("--authenticator-index", type=int)

    commands.add_parser("capabilities", help="Show which authenticator types this device supports")
    return parser.parse_args(argv)


def _purposes(values: list[str] | None) -> list[AuthPurpose]:
    return [AuthPurpose(value) for value in values or [AuthPurpose.LOGIN.value]]


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    settings = MFASettings(authority_url=args.authority) if args.authority else MFASettings()
    client = MFAClient(settings)

    try:
        if args.command == "capabilities":
            for auth_type, supported in client.capability_report().items():
                print(f"{auth_type.value:<20} {'yes' if supported else 'no'}")
        elif args.command == "register":
            authenticator_id = client.register_authenticator(
                _purposes(args.purpose),
                AuthType(args.type),
                device=DeviceInfo.current(),
                email=args.email,
            )
            print(authenticator_id)
        elif args.command == "register-platform":
            print(client.register_platform_authenticator(_purposes(args.purpose), email=args.email))
        elif args.command == "auth":
            token = client.get_auth_token(
                AuthPurpose(args.purpose),
                AuthType(args.type) if args.type else None,
                email=args.email,
                authenticator_id=args.authenticator_id,
                authenticator_index=args.authenticator_index,
            )
            print(token)
    except MFAError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
