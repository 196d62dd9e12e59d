import argparse
import logging
import sys
from datetime import timedelta
from pathlib import Path

from contenthub.adapters.sqlite.migrator import SQLiteMigrator
from contenthub.adapters.sqlite.repos import SQLiteHubRepo, SQLiteUserRepo
from contenthub.api.auth_utils import create_access_token
from contenthub.api.deps import Settings
from contenthub.domain.entities import EdgeHub, User
from contenthub.domain.errors import PersistenceFailed
from contenthub.rules.loader import load_rules_or_default

logger = logging.getLogger("contenthub.cli")

ROLES = ("admin", "moderator", "editor", "contributor")


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    applied = SQLiteMigrator(settings.db_path).run_migrations()
    print(f"Applied {len(applied)} migration(s) to {settings.db_path}.")


def handle_add_user(settings: Settings, args: argparse.Namespace) -> None:
    repo = SQLiteUserRepo(settings.db_path)
    existing = repo.get_by_email(args.email)
    roles = list(dict.fromkeys(args.role))
    if existing:
        user = existing.model_copy(
            update={"roles": roles, "display_name": args.name or existing.display_name}
        )
        logger.info("Updating roles for %s", args.email)
    else:
        user = User(email=args.email, display_name=args.name or args.email, roles=roles)
    repo.save(user)
    print(f"User {user.email} ({user.id}) roles: {', '.join(user.roles)}")


def handle_register_hub(settings: Settings, args: argparse.Namespace) -> None:
    repo = SQLiteHubRepo(settings.db_path)
    existing = repo.get_by_hub_id(args.hub_id)
    if existing:
        hub = existing.model_copy(
            update={
                "name": args.name,
                "location": args.location or existing.location,
                "status": "inactive" if args.inactive else "active",
            }
        )
    else:
        hub = EdgeHub(
            hub_id=args.hub_id,
            name=args.name,
            location=args.location or "",
            status="inactive" if args.inactive else "active",
        )
    try:
        repo.save(hub)
    except PersistenceFailed as e:
        logger.error(e.message)
        sys.exit(1)
    print(f"Hub {hub.hub_id} registered as '{hub.name}' ({hub.status}).")


def handle_list_hubs(settings: Settings, args: argparse.Namespace) -> None:
    hubs = SQLiteHubRepo(settings.db_path).list()
    if not hubs:
        print("No hubs registered.")
        return
    for hub in hubs:
        print(f" - {hub.hub_id}: {hub.name} [{hub.status}] {hub.location}".rstrip())


def handle_issue_token(settings: Settings, args: argparse.Namespace) -> None:
    user = SQLiteUserRepo(settings.db_path).get_by_email(args.email)
    if not user:
        logger.error("User %s not found. Create it with add-user first.", args.email)
        sys.exit(1)

    token = create_access_token(
        {"sub": str(user.id)},
        expires_delta=timedelta(minutes=args.minutes),
        secret_key=settings.secret_key,
    )
    print(token)


def handle_serve(settings: Settings, args: argparse.Namespace) -> None:
    import uvicorn

    uvicorn.run("contenthub.api.main:app", host=args.host, port=args.port, reload=args.reload)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Content Hub CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Apply pending database migrations")

    user_parser = subparsers.add_parser("add-user", help="Create a user or replace its roles")
    user_parser.add_argument("email")
    user_parser.add_argument("--name", help="Display name (defaults to the email)")
    user_parser.add_argument(
        "--role", action="append", choices=ROLES, required=True, help="Repeat for several roles"
    )

    hub_parser = subparsers.add_parser("register-hub", help="Register or update an edge hub")
    hub_parser.add_argument("hub_id", help="Stable external hub identifier")
    hub_parser.add_argument("name")
    hub_parser.add_argument("--location")
    hub_parser.add_argument("--inactive", action="store_true")

    subparsers.add_parser("list-hubs", help="List registered edge hubs")

    token_parser = subparsers.add_parser("issue-token", help="Mint a bearer token for local use")
    token_parser.add_argument("email")
    token_parser.add_argument("--minutes", type=int, default=60 * 24)

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true")

    return parser


HANDLERS = {
    "migrate": handle_migrate,
    "add-user": handle_add_user,
    "register-hub": handle_register_hub,
    "list-hubs": handle_list_hubs,
    "issue-token": handle_issue_token,
    "serve": handle_serve,
}


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    settings = Settings()
    try:
        load_rules_or_default(Path(settings.rules_path))
    except ValueError as e:
        logger.error("Rules file %s is invalid: %s", settings.rules_path, e)
        sys.exit(1)

    if args.command not in ("migrate", "serve"):
        # Every other command needs the schema
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        SQLiteMigrator(settings.db_path).run_migrations()

    HANDLERS[args.command](settings, args)


if __name__ == "__main__":
    main()
