"""Command-line entry point for the job board service."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from email_validator import EmailNotValidError, validate_email

from jobboard.auth import TokenService
from jobboard.config import AppConfig, ConfigurationError, EnvironmentConfig, load_config
from jobboard.domain.models import UserRole
from jobboard.feeds import FeedError, FeedImporter
from jobboard.logging import configure_logging, get_logger
from jobboard.persistence import (
    DatabaseConnectionError,
    DataIntegrityError,
    ProfileRepository,
    UserRepository,
    close_database,
    get_session,
    init_database,
)

logger = get_logger(__name__, component="cli")

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and resolve the effective log level.

    Log level priority: CLI flag > LOG_LEVEL > config file > INFO.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif env_config.log_level:
        pass
    elif app_config.logging and app_config.logging.level:
        env_config.log_level = app_config.logging.level
    else:
        env_config.log_level = "INFO"

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jobboard",
        description="Job board service: skill matching, recommendations and real-time notifications",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml if present)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=LOG_LEVELS,
        help="Log level (overrides config and environment)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the HTTP and WebSocket server")
    serve.add_argument("--host", default=None, help="Override server.host")
    serve.add_argument("--port", type=int, default=None, help="Override server.port")

    feed = commands.add_parser("import-feed", help="Import the job feed once and exit")
    feed.add_argument("--source", default=None, help="Override feed.source (file path or URL)")

    user = commands.add_parser("create-user", help="Create an account")
    user.add_argument("--name", required=True)
    user.add_argument("--email", required=True)
    user.add_argument("--role", choices=[role.value for role in UserRole], default=UserRole.JOBSEEKER.value)
    user.add_argument("--skills", default=None, help="Comma-separated skills for the user's profile")
    user.add_argument("--experience", type=int, default=None, help="Years of experience")
    user.add_argument("--headline", default=None)
    user.add_argument("--resume-url", default=None)

    token = commands.add_parser("issue-token", help="Print a bearer token for an existing user")
    lookup = token.add_mutually_exclusive_group(required=True)
    lookup.add_argument("--user-id", type=int)
    lookup.add_argument("--email")
    token.add_argument("--ttl", type=int, default=None, help="Token lifetime in seconds")

    return parser


def cmd_serve(args, app_config: AppConfig, env_config: EnvironmentConfig) -> int:
    import uvicorn

    from jobboard.api import create_app

    host = args.host or app_config.server.host
    port = args.port or app_config.server.port

    logger.info(
        f"Serving on {host}:{port}",
        extra={"event": "service.starting", "host": host, "port": port},
    )
    # log_config=None keeps the handlers installed by configure_logging
    uvicorn.run(create_app(app_config, env_config), host=host, port=port, log_config=None)
    return 0


def cmd_import_feed(args, app_config: AppConfig, env_config: EnvironmentConfig) -> int:
    source = args.source or app_config.feed.source
    if not source:
        print("No feed source configured. Set feed.source or pass --source.", file=sys.stderr)
        return 2

    init_database(env_config.database_url)
    try:
        # No server is running, so there is nobody to broadcast to
        importer = FeedImporter(source, timeout=app_config.feed.request_timeout)
        result = importer.run_once()
    except FeedError as e:
        print(f"Feed import failed: {e}", file=sys.stderr)
        return 1
    finally:
        close_database()

    print(
        f"Imported {result.created} job(s): {result.skipped_existing} already present, "
        f"{result.invalid} invalid, {result.fetched} in feed"
    )
    return 0


def cmd_create_user(args, app_config: AppConfig, env_config: EnvironmentConfig) -> int:
    try:
        email = validate_email(args.email, check_deliverability=False).normalized
    except EmailNotValidError as e:
        print(f"Invalid email address: {e}", file=sys.stderr)
        return 2

    profile_fields = {
        "skills": args.skills,
        "experience": args.experience,
        "headline": args.headline,
        "resume_url": args.resume_url,
    }
    profile_fields = {key: value for key, value in profile_fields.items() if value is not None}

    init_database(env_config.database_url)
    try:
        with get_session() as session:
            user = UserRepository(session).create(name=args.name, email=email, role=UserRole(args.role))
            if profile_fields:
                ProfileRepository(session).save(user.id, **profile_fields)
    except DataIntegrityError as e:
        print(str(e), file=sys.stderr)
        return 1
    finally:
        close_database()

    logger.info(
        "User created",
        extra={"event": "user.created", "user_id": user.id, "role": user.role.value},
    )
    print(f"Created {user.role.value} #{user.id} <{user.email}>")
    return 0


def cmd_issue_token(args, app_config: AppConfig, env_config: EnvironmentConfig) -> int:
    init_database(env_config.database_url)
    try:
        with get_session() as session:
            repo = UserRepository(session)
            user = repo.get(args.user_id) if args.user_id is not None else repo.get_by_email(args.email)
    finally:
        close_database()

    if user is None:
        print("User not found", file=sys.stderr)
        return 1

    tokens = TokenService(
        env_config.jwt_secret,
        algorithm=app_config.auth.algorithm,
        ttl_seconds=app_config.auth.token_ttl_seconds,
    )
    print(tokens.issue(user.id, user.role, ttl_seconds=args.ttl))
    return 0


COMMANDS = {
    "serve": cmd_serve,
    "import-feed": cmd_import_feed,
    "create-user": cmd_create_user,
    "issue-token": cmd_issue_token,
}


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    args = build_parser().parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)
        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )
        return COMMANDS[args.command](args, app_config, env_config)

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e.message}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except DatabaseConnectionError as e:
        print(f"Database Error: {e}", file=sys.stderr)
        logger.error(
            f"Database unavailable: {e}",
            extra={"event": "database.unavailable", "error_type": "DatabaseConnectionError"},
        )
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0


if __name__ == "__main__":
    sys.exit(main())
