from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from contenthub.adapters.sqlite.migrator import SQLiteMigrator
from contenthub.adapters.sqlite.repos import SQLiteUserRepo
from contenthub.api.auth_utils import create_access_token
from contenthub.api.deps import Settings, get_settings
from contenthub.api.main import app
from contenthub.domain.entities import User
from contenthub.rules.loader import load_rules
from contenthub.rules.models import Rules

PROJECT_ROOT = Path(__file__).resolve().parent.parent
RULES_PATH = PROJECT_ROOT / "rules.yaml"
TEST_SECRET = "test-secret"


@pytest.fixture
def rules() -> Rules:
    """The real rules file; a broken one should fail the suite."""
    return load_rules(RULES_PATH)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    s = Settings()
    s.data_dir = tmp_path / "data"
    s.data_dir.mkdir()
    s.db_path = str(s.data_dir / "contenthub.db")
    s.uploads_dir = s.data_dir / "uploads"
    s.rules_path = RULES_PATH
    s.secret_key = TEST_SECRET
    s.public_url = ""
    return s


@pytest.fixture
def db_path(settings: Settings) -> str:
    """Migrated database for the test."""
    SQLiteMigrator(settings.db_path).run_migrations()
    return settings.db_path


@pytest.fixture
def make_user(db_path: str) -> Callable[..., User]:
    repo = SQLiteUserRepo(db_path)

    def _make(*roles: str, email: str | None = None, status: str = "active") -> User:
        name = "-".join(roles) or "nobody"
        user = User(
            email=email or f"{name}@example.com",
            display_name=name.title(),
            roles=list(roles),  # type: ignore[arg-type]
            status=status,  # type: ignore[arg-type]
        )
        repo.save(user)
        return user

    return _make


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    def _headers(user: User) -> dict[str, str]:
        token = create_access_token({"sub": str(user.id)}, secret_key=TEST_SECRET)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def client(settings: Settings, db_path: str) -> Iterator[TestClient]:
    """API client against the migrated temp database (lifespan not run)."""
    app.dependency_overrides[get_settings] = lambda: settings
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
