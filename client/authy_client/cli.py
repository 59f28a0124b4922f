import argparse
import json
import os
import sys

from .authy_api_caller import AuthyAPIConfig, AuthyClient, default_config_path
from .exceptions import AuthyError
from .logging_config import LOG_LEVELS, setup_logging


def get_default_config_dir() -> str:
    """Get the default configuration directory following XDG standards"""
    return os.path.dirname(default_config_path())


def load_cli_config(args: argparse.Namespace) -> AuthyAPIConfig:
    """Config file if one exists (or was given), otherwise AUTHY_* environment variables"""
    if args.config or os.path.exists(default_config_path()):
        return AuthyAPIConfig.from_file(args.config)
    return AuthyAPIConfig.from_env()


def print_result(args: argparse.Namespace, result, summary: str) -> int:
    if args.verbose:
        print(result.raw_response or json.dumps({"message": result.message, "errors": result.errors}, indent=2))
    elif result.ok:
        print(summary)
    else:
        details = ", ".join(f"{k}: {v}" for k, v in result.errors.items())
        print(f"Failed ({result.status.value}): {result.message}" + (f" [{details}]" if details else ""),
              file=sys.stderr)
    return 0 if result.ok else 1


def run_operation(args: argparse.Namespace, operation) -> int:
    try:
        setup_logging(args.log_level)
        client = AuthyClient(load_cli_config(args))
        return operation(client)
    except AuthyError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_register(args: argparse.Namespace) -> int:
    """Register a user"""
    def operation(client):
        result = client.register_user(args.email, args.cellphone, args.country_code)
        return print_result(args, result, f"User registered! Authy id: {result.user_id or 'N/A'}")
    return run_operation(args, operation)


def cmd_remove(args: argparse.Namespace) -> int:
    """Remove a user"""
    def operation(client):
        result = client.remove_user(args.user_id)
        return print_result(args, result, result.message or f"User {args.user_id} removed")
    return run_operation(args, operation)


def cmd_verify(args: argparse.Namespace) -> int:
    """Verify a token"""
    def operation(client):
        result = client.verify_token(args.user_id, args.token, force=args.force)
        return print_result(args, result, "Token is valid")
    return run_operation(args, operation)


def cmd_sms(args: argparse.Namespace) -> int:
    """Send a token by SMS"""
    def operation(client):
        result = client.send_sms(args.user_id, force=args.force, locale=args.locale)
        if result.ignored:
            summary = f"SMS not sent: {result.message}"
        else:
            summary = f"SMS sent to {result.cellphone or 'user ' + args.user_id}"
        return print_result(args, result, summary)
    return run_operation(args, operation)


def cmd_call(args: argparse.Namespace) -> int:
    """Deliver a token by phone call"""
    def operation(client):
        result = client.start_phone_call(args.user_id, force=args.force)
        if result.ignored:
            summary = f"Call not started: {result.message}"
        else:
            summary = f"Calling {result.cellphone or 'user ' + args.user_id}"
        return print_result(args, result, summary)
    return run_operation(args, operation)


def cmd_init(args: argparse.Namespace) -> int:
    """Initialize the Authy client config file"""
    config_dir = args.config_dir or get_default_config_dir()
    config_path = os.path.join(config_dir, "config.json")

    print(f"Initializing Authy client in: {config_dir}")

    if os.path.exists(config_path) and not args.force:
        print("File already exists: config.json")
        print("Use --force to overwrite existing files")
        return 1

    api_key = args.api_key or os.environ.get("AUTHY_API_KEY", "")
    try:
        config = AuthyAPIConfig(api_key=api_key, sandbox=args.sandbox, base_url=args.base_url)
    except AuthyError as e:
        print(f"Error: {e} (pass --api-key or set AUTHY_API_KEY)", file=sys.stderr)
        return 1

    try:
        os.makedirs(config_dir, exist_ok=True)
        with open(config_path, 'w') as f:
            json.dump(config.to_dict(), f, indent=2)
        os.chmod(config_path, 0o600)
    except OSError as e:
        print(f"Failed to create config file: {e}", file=sys.stderr)
        return 1

    print(f"Created config file: {config_path}")
    print(f"Environment: {config.environment.name.lower()} ({config.resolve_base_url()})")
    return 0


def add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", default=None, help="Config file path (default: auto-detect from config directory, then AUTHY_* environment)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Print the raw JSON response (default: False)")
    parser.add_argument("--log-level", default=None, type=str.upper, choices=LOG_LEVELS, help="Log level (default: AUTHY_LOG_LEVEL or WARNING)")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="authy-cli", description="Authy two-factor authentication client utilities")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_init = sub.add_parser("init", help="Create the client config file", description="Create config.json holding the API key and environment.")
    p_init.add_argument("--config-dir", help="Config directory (default: XDG_CONFIG_HOME/authy_client or ~/.config/authy_client)")
    p_init.add_argument("--api-key", help="Authy API key (default: AUTHY_API_KEY)")
    p_init.add_argument("--sandbox", action="store_true", help="Use the sandbox API host")
    p_init.add_argument("--base-url", help="Override the API host, e.g. a local mock server")
    p_init.add_argument("--force", action="store_true", help="Overwrite existing files")
    p_init.set_defaults(func=cmd_init)

    p_reg = sub.add_parser("register", help="Register a user", description="Register a user by email and cellphone number.")
    p_reg.add_argument("email", help="User email address")
    p_reg.add_argument("cellphone", help="User cellphone number")
    p_reg.add_argument("--country-code", type=int, default=1, help="Phone country code (default: 1)")
    add_common_options(p_reg)
    p_reg.set_defaults(func=cmd_register)

    p_rm = sub.add_parser("remove", help="Remove a user", description="Remove a registered user (always forced).")
    p_rm.add_argument("user_id", help="Authy user id")
    add_common_options(p_rm)
    p_rm.set_defaults(func=cmd_remove)

    p_ver = sub.add_parser("verify", help="Verify a token", description="Verify a one-time token for a user.")
    p_ver.add_argument("user_id", help="Authy user id")
    p_ver.add_argument("token", help="One-time token")
    p_ver.add_argument("--force", action="store_true", help="Verify even if the user has not finished registering")
    add_common_options(p_ver)
    p_ver.set_defaults(func=cmd_verify)

    p_sms = sub.add_parser("sms", help="Send a token by SMS", description="Send a one-time token to a user by SMS.")
    p_sms.add_argument("user_id", help="Authy user id")
    p_sms.add_argument("--force", action="store_true", help="Send even if the user uses the mobile app")
    p_sms.add_argument("--locale", default=None, help="Message language (default: config locale, 'en')")
    add_common_options(p_sms)
    p_sms.set_defaults(func=cmd_sms)

    p_call = sub.add_parser("call", help="Deliver a token by phone call", description="Start a phone call reading a one-time token to a user.")
    p_call.add_argument("user_id", help="Authy user id")
    p_call.add_argument("--force", action="store_true", help="Call even if the user uses the mobile app")
    add_common_options(p_call)
    p_call.set_defaults(func=cmd_call)

    return p


def main(argv=None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
