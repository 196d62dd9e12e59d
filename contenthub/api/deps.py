import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from contenthub.adapters.clock import SystemClock
from contenthub.adapters.fs.filestore import FileSystemStore
from contenthub.adapters.sqlite.repos import (
    SQLiteAssignmentRepo,
    SQLiteContentRepo,
    SQLiteHubRepo,
    SQLiteUserRepo,
)
from contenthub.api.auth_utils import decode_access_token
from contenthub.domain.entities import User
from contenthub.domain.errors import Unauthorized
from contenthub.domain.policy import PolicyEngine
from contenthub.rules.loader import load_rules_or_default
from contenthub.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("HUB_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "contenthub.db")
        self.uploads_dir = self.data_dir / "uploads"
        self.rules_path = Path(os.environ.get("HUB_RULES_PATH", str(self.base_dir / "rules.yaml")))
        self.secret_key = os.environ.get("HUB_SECRET_KEY", "dev-secret-unsafe")
        # Prefix for uploaded image URLs; empty means relative URLs
        self.public_url = os.environ.get("HUB_PUBLIC_URL", "").rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def _rules_for(rules_path: Path) -> Rules:
    return load_rules_or_default(rules_path)


def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return _rules_for(settings.rules_path)


# --- Repos ---
def get_content_repo(settings: Settings = Depends(get_settings)) -> SQLiteContentRepo:
    return SQLiteContentRepo(settings.db_path)


def get_user_repo(settings: Settings = Depends(get_settings)) -> SQLiteUserRepo:
    return SQLiteUserRepo(settings.db_path)


def get_hub_repo(settings: Settings = Depends(get_settings)) -> SQLiteHubRepo:
    return SQLiteHubRepo(settings.db_path)


def get_assignment_repo(settings: Settings = Depends(get_settings)) -> SQLiteAssignmentRepo:
    return SQLiteAssignmentRepo(settings.db_path)


def get_file_store(settings: Settings = Depends(get_settings)) -> FileSystemStore:
    return FileSystemStore(base_path=str(settings.uploads_dir))


# --- Services ---
def get_policy(rules: Rules = Depends(get_rules)) -> PolicyEngine:
    return PolicyEngine(rules)


_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


def get_current_user(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    settings: Settings = Depends(get_settings),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
) -> User:
    """Resolve the bearer token to an active user. Raises Unauthorized (401/403)."""
    if not token:
        raise Unauthorized("Not authenticated", authenticated=False)

    payload = decode_access_token(token, settings.secret_key)
    if not payload:
        raise Unauthorized("Invalid or expired token", authenticated=False)

    user_id = payload.get("sub")
    if user_id is None or not isinstance(user_id, str):
        raise Unauthorized("Invalid token payload", authenticated=False)

    try:
        user = user_repo.get_by_id(UUID(user_id))
    except ValueError:
        user = None
    if not user:
        raise Unauthorized("User not found", authenticated=False)

    if user.status != "active":
        raise Unauthorized("Inactive user")

    return user


def get_optional_user(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    settings: Settings = Depends(get_settings),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
) -> User | None:
    if not token:
        return None
    return get_current_user(token, settings, user_repo)
