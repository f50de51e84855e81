#!/usr/bin/env python3
"""Operator entry point for the Bitcoin RMF community review service.

Usage:
    python run.py serve [--host HOST] [--port PORT] [--reload] [--workers N]
    python run.py migrate [--revision REV]
    python run.py token USER_ID [--name NAME]

Examples:
    python run.py serve --reload             # local development
    python run.py migrate                    # alembic upgrade head
    python run.py token 1234567 --name Ada   # session token for manual API calls
"""

import argparse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Bitcoin RMF community review service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Port to bind to (default: 8000)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    serve.add_argument("--workers", type=int, default=1, help="Worker processes (ignored with --reload)")
    serve.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        default="info",
    )

    migrate = commands.add_parser("migrate", help="Apply database migrations")
    migrate.add_argument("--revision", default="head")

    token = commands.add_parser("token", help="Mint a session token signed with JWT_SECRET_KEY")
    token.add_argument("user_id")
    token.add_argument("--username", default="")
    token.add_argument("--name", default="")

    return parser


def serve(args: argparse.Namespace) -> None:
    import uvicorn

    print(f"Review service at http://{args.host}:{args.port} (docs: /docs)")
    uvicorn.run(
        "rmf_backend.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=1 if args.reload else args.workers,
        log_level=args.log_level,
    )


def migrate(args: argparse.Namespace) -> None:
    from alembic import command
    from alembic.config import Config

    command.upgrade(Config("alembic.ini"), args.revision)


def token(args: argparse.Namespace) -> None:
    from rmf_backend.auth import create_session_token

    print(create_session_token(args.user_id, username=args.username, name=args.name))


COMMANDS = {"serve": serve, "migrate": migrate, "token": token}


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    COMMANDS[args.command](args)


if __name__ == "__main__":
    main()
