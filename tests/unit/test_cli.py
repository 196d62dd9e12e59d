from pathlib import Path

import pytest

from contenthub.adapters.sqlite.repos import SQLiteHubRepo, SQLiteUserRepo
from contenthub.api.auth_utils import decode_access_token
from contenthub.app_shell.cli import build_parser, main

RULES_PATH = Path(__file__).resolve().parents[2] / "rules.yaml"


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    d = tmp_path / "data"
    monkeypatch.setenv("HUB_DATA_DIR", str(d))
    monkeypatch.setenv("HUB_RULES_PATH", str(RULES_PATH))
    monkeypatch.setenv("HUB_SECRET_KEY", "cli-secret")
    return d


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_role_choices_enforced():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["add-user", "a@example.com", "--role", "owner"])


def test_migrate(data_dir, capsys):
    main(["migrate"])
    assert "Applied 1 migration(s)" in capsys.readouterr().out
    assert (data_dir / "contenthub.db").exists()

    main(["migrate"])
    assert "Applied 0 migration(s)" in capsys.readouterr().out


def test_add_user_then_update_roles(data_dir, capsys):
    main(["add-user", "mod@example.com", "--name", "Mod", "--role", "moderator"])
    main(["add-user", "mod@example.com", "--role", "moderator", "--role", "editor"])

    user = SQLiteUserRepo(str(data_dir / "contenthub.db")).get_by_email("mod@example.com")
    assert user is not None
    assert user.display_name == "Mod"
    assert sorted(user.roles) == ["editor", "moderator"]


def test_register_and_list_hubs(data_dir, capsys):
    main(["register-hub", "hub-nairobi-01", "Nairobi Central", "--location", "Nairobi"])
    main(["register-hub", "hub-nairobi-01", "Nairobi Central", "--inactive"])
    capsys.readouterr()

    main(["list-hubs"])
    out = capsys.readouterr().out
    assert "hub-nairobi-01: Nairobi Central [inactive] Nairobi" in out

    hubs = SQLiteHubRepo(str(data_dir / "contenthub.db")).list()
    assert len(hubs) == 1


def test_list_hubs_empty(data_dir, capsys):
    main(["list-hubs"])
    assert "No hubs registered." in capsys.readouterr().out


def test_issue_token(data_dir, capsys):
    main(["add-user", "c@example.com", "--role", "contributor"])
    capsys.readouterr()

    main(["issue-token", "c@example.com", "--minutes", "5"])
    token = capsys.readouterr().out.strip()

    payload = decode_access_token(token, secret_key="cli-secret")
    user = SQLiteUserRepo(str(data_dir / "contenthub.db")).get_by_email("c@example.com")
    assert payload is not None and user is not None
    assert payload["sub"] == str(user.id)


def test_issue_token_unknown_user(data_dir):
    with pytest.raises(SystemExit) as exc_info:
        main(["issue-token", "ghost@example.com"])
    assert exc_info.value.code == 1


def test_invalid_rules_file(tmp_path, monkeypatch):
    bad = tmp_path / "rules.yaml"
    bad.write_text("review: [unclosed")
    monkeypatch.setenv("HUB_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("HUB_RULES_PATH", str(bad))

    with pytest.raises(SystemExit) as exc_info:
        main(["list-hubs"])
    assert exc_info.value.code == 1
