import builtins
import sqlite3
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from contenthub.domain.encoding import (
    decode_questions,
    decode_string_list,
    encode_questions,
    encode_string_list,
)
from contenthub.domain.entities import (
    AssignedFilter,
    Content,
    ContentHubAssignment,
    ContentStatus,
    EdgeHub,
    HubContentItem,
    User,
)
from contenthub.domain.errors import NotFound, PersistenceFailed, VersionConflict


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def parse_dt(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


def _like_pattern(search: str) -> str:
    escaped = search.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class _SQLiteRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn


class SQLiteContentRepo(_SQLiteRepo):
    """Content rows. List-valued fields are stored as JSON text encoded once."""

    _COLUMNS = (
        "id, title, description, body_markup, cover_image_url, language, "
        "original_language, category_ids, author_ids, age_group_id, "
        "target_countries, questions, status, rejection_reason, reviewed_by, "
        "reviewed_at, contributor_id, version, created_at, updated_at"
    )

    def _row_values(self, item: Content) -> tuple[Any, ...]:
        return (
            str(item.id),
            item.title,
            item.description,
            item.body_markup,
            item.cover_image_url,
            item.language,
            item.original_language,
            encode_string_list(item.category_ids),
            encode_string_list(item.author_ids),
            item.age_group_id,
            encode_string_list(item.target_countries),
            encode_questions(item.questions),
            item.status,
            item.rejection_reason,
            str(item.reviewed_by) if item.reviewed_by else None,
            item.reviewed_at.isoformat() if item.reviewed_at else None,
            str(item.contributor_id),
            item.version,
            item.created_at.isoformat(),
            item.updated_at.isoformat(),
        )

    def save(self, item: Content) -> Content:
        """Insert a row, or overwrite every column of an existing one."""
        conn = self._get_conn()
        try:
            conn.execute(
                f"""
                INSERT INTO content ({self._COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title=excluded.title,
                    description=excluded.description,
                    body_markup=excluded.body_markup,
                    cover_image_url=excluded.cover_image_url,
                    language=excluded.language,
                    original_language=excluded.original_language,
                    category_ids=excluded.category_ids,
                    author_ids=excluded.author_ids,
                    age_group_id=excluded.age_group_id,
                    target_countries=excluded.target_countries,
                    questions=excluded.questions,
                    status=excluded.status,
                    rejection_reason=excluded.rejection_reason,
                    reviewed_by=excluded.reviewed_by,
                    reviewed_at=excluded.reviewed_at,
                    version=excluded.version,
                    updated_at=excluded.updated_at
            """,
                self._row_values(item),
            )
            conn.commit()
            return item
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise PersistenceFailed(f"Failed to save content: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def update_fields(self, item: Content, *, expected_version: int | None = None) -> Content:
        """
        Write the editable columns of ``item`` and bump the stored version.

        Status, review data and ownership are left as stored. With
        ``expected_version`` the write only applies while the stored version
        still matches. Returns the row as stored after the write.
        """
        sql = """
            UPDATE content SET
                title=?, description=?, body_markup=?, cover_image_url=?,
                language=?, original_language=?, category_ids=?, author_ids=?,
                age_group_id=?, target_countries=?, questions=?,
                version=version + 1, updated_at=?
            WHERE id = ?
        """
        params: builtins.list[Any] = [
            item.title,
            item.description,
            item.body_markup,
            item.cover_image_url,
            item.language,
            item.original_language,
            encode_string_list(item.category_ids),
            encode_string_list(item.author_ids),
            item.age_group_id,
            encode_string_list(item.target_countries),
            encode_questions(item.questions),
            item.updated_at.isoformat(),
            str(item.id),
        ]
        if expected_version is not None:
            sql += " AND version = ?"
            params.append(expected_version)

        conn = self._get_conn()
        try:
            cur = conn.execute(sql, params)
            if cur.rowcount == 0:
                row = conn.execute(
                    "SELECT version FROM content WHERE id = ?", (str(item.id),)
                ).fetchone()
                conn.rollback()
                if row is None:
                    raise NotFound(f"Content {item.id} not found")
                raise VersionConflict(expected_version or 0, row["version"])

            stored = conn.execute(
                "SELECT * FROM content WHERE id = ?", (str(item.id),)
            ).fetchone()
            conn.commit()
            return self._map_row(stored)
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise PersistenceFailed(f"Failed to save content: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> Content:
        return Content(
            id=UUID(row["id"]),
            title=row["title"],
            description=row["description"] or "",
            body_markup=row["body_markup"] or "",
            cover_image_url=row["cover_image_url"],
            language=row["language"],
            original_language=row["original_language"] or "",
            category_ids=decode_string_list(row["category_ids"], field="categoryIds"),
            author_ids=decode_string_list(row["author_ids"], field="authorIds"),
            age_group_id=row["age_group_id"],
            target_countries=decode_string_list(row["target_countries"]),
            questions=decode_questions(row["questions"]),
            status=row["status"],
            rejection_reason=row["rejection_reason"],
            reviewed_by=UUID(row["reviewed_by"]) if row["reviewed_by"] else None,
            reviewed_at=parse_dt(row["reviewed_at"]),
            contributor_id=UUID(row["contributor_id"]),
            version=row["version"],
            created_at=parse_dt(row["created_at"]) or datetime.min,
            updated_at=parse_dt(row["updated_at"]) or datetime.min,
        )

    def get_by_id(self, content_id: UUID) -> Content | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM content WHERE id = ?", (str(content_id),)
            ).fetchone()
            if not row:
                return None
            return self._map_row(row)
        finally:
            conn.close()

    def list(
        self,
        *,
        status: ContentStatus | None = None,
        search: str | None = None,
        contributor_id: UUID | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[builtins.list[Content], int]:
        where = " WHERE 1=1"
        params: builtins.list[Any] = []
        if status:
            where += " AND status = ?"
            params.append(status)
        if contributor_id:
            where += " AND contributor_id = ?"
            params.append(str(contributor_id))
        if search:
            where += (
                " AND (LOWER(title) LIKE ? ESCAPE '\\'"
                " OR LOWER(description) LIKE ? ESCAPE '\\')"
            )
            pattern = _like_pattern(search)
            params.extend([pattern, pattern])

        conn = self._get_conn()
        try:
            total = conn.execute(
                "SELECT COUNT(*) AS n FROM content" + where, params
            ).fetchone()["n"]
            rows = conn.execute(
                "SELECT * FROM content" + where + " ORDER BY created_at DESC, id LIMIT ? OFFSET ?",
                [*params, limit, offset],
            ).fetchall()
            return [self._map_row(row) for row in rows], total
        finally:
            conn.close()

    def transition_status(
        self,
        content_id: UUID,
        from_status: ContentStatus,
        to_status: ContentStatus,
        *,
        reason: str | None,
        reviewer_id: UUID | None,
        now: datetime,
    ) -> bool:
        conn = self._get_conn()
        try:
            cur = conn.execute(
                """
                UPDATE content SET
                    status = ?,
                    rejection_reason = ?,
                    reviewed_by = ?,
                    reviewed_at = ?,
                    updated_at = ?,
                    version = version + 1
                WHERE id = ? AND status = ?
            """,
                (
                    to_status,
                    reason if to_status == "rejected" else None,
                    str(reviewer_id) if reviewer_id else None,
                    now.isoformat(),
                    now.isoformat(),
                    str(content_id),
                    from_status,
                ),
            )
            conn.commit()
            return cur.rowcount == 1
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()


class SQLiteUserRepo(_SQLiteRepo):
    def save(self, user: User) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO users (
                    id, email, display_name, status, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    email=excluded.email,
                    display_name=excluded.display_name,
                    status=excluded.status,
                    updated_at=excluded.updated_at
            """,
                (
                    str(user.id),
                    user.email,
                    user.display_name,
                    user.status,
                    user.created_at.isoformat(),
                    user.updated_at.isoformat(),
                ),
            )

            conn.execute("DELETE FROM role_assignments WHERE user_id = ?", (str(user.id),))
            for role in dict.fromkeys(user.roles):
                conn.execute(
                    "INSERT INTO role_assignments (id, user_id, role, created_at) "
                    "VALUES (?, ?, ?, ?)",
                    (str(uuid4()), str(user.id), role, datetime.now(UTC).isoformat()),
                )

            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def get_by_email(self, email: str) -> User | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM users WHERE email = ?", (email,)).fetchone()
            if not row:
                return None
            return self._map_row_to_user(conn, row)
        finally:
            conn.close()

    def get_by_id(self, user_id: UUID) -> User | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (str(user_id),)).fetchone()
            if not row:
                return None
            return self._map_row_to_user(conn, row)
        finally:
            conn.close()

    def list_all(self) -> list[User]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM users ORDER BY email").fetchall()
            return [self._map_row_to_user(conn, row) for row in rows]
        finally:
            conn.close()

    def _map_row_to_user(self, conn: sqlite3.Connection, row: dict[str, Any]) -> User:
        role_rows = conn.execute(
            "SELECT role FROM role_assignments WHERE user_id = ? ORDER BY role", (row["id"],)
        ).fetchall()
        return User(
            id=UUID(row["id"]),
            email=row["email"],
            display_name=row["display_name"],
            roles=[r["role"] for r in role_rows],
            status=row["status"],
            created_at=parse_dt(row["created_at"]) or datetime.min,
            updated_at=parse_dt(row["updated_at"]) or datetime.min,
        )


class SQLiteHubRepo(_SQLiteRepo):
    def save(self, hub: EdgeHub) -> EdgeHub:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO edge_hubs (id, hub_id, name, location, status, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    hub_id=excluded.hub_id,
                    name=excluded.name,
                    location=excluded.location,
                    status=excluded.status
            """,
                (
                    str(hub.id),
                    hub.hub_id,
                    hub.name,
                    hub.location,
                    hub.status,
                    hub.created_at.isoformat(),
                ),
            )
            conn.commit()
            return hub
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise PersistenceFailed(f"Hub id {hub.hub_id} already registered") from e
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> EdgeHub:
        return EdgeHub(
            id=UUID(row["id"]),
            hub_id=row["hub_id"],
            name=row["name"],
            location=row["location"] or "",
            status=row["status"],
            created_at=parse_dt(row["created_at"]) or datetime.min,
        )

    def get_by_hub_id(self, hub_id: str) -> EdgeHub | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM edge_hubs WHERE hub_id = ?", (hub_id,)).fetchone()
            return self._map_row(row) if row else None
        finally:
            conn.close()

    def list(self) -> builtins.list[EdgeHub]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM edge_hubs ORDER BY name").fetchall()
            return [self._map_row(row) for row in rows]
        finally:
            conn.close()


class SQLiteAssignmentRepo(_SQLiteRepo):
    """content_hub_assignments join table; the primary key makes pairs unique."""

    def add(self, assignment: ContentHubAssignment) -> bool:
        conn = self._get_conn()
        try:
            cur = conn.execute(
                """
                INSERT OR IGNORE INTO content_hub_assignments
                (content_id, hub_pk, assigned_by, assigned_at)
                VALUES (?, ?, ?, ?)
            """,
                (
                    str(assignment.content_id),
                    str(assignment.hub_pk),
                    str(assignment.assigned_by) if assignment.assigned_by else None,
                    assignment.assigned_at.isoformat(),
                ),
            )
            conn.commit()
            return cur.rowcount == 1
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def remove(self, content_id: UUID, hub_pk: UUID) -> bool:
        conn = self._get_conn()
        try:
            cur = conn.execute(
                "DELETE FROM content_hub_assignments WHERE content_id = ? AND hub_pk = ?",
                (str(content_id), str(hub_pk)),
            )
            conn.commit()
            return cur.rowcount > 0
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def exists(self, content_id: UUID, hub_pk: UUID) -> bool:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT 1 AS hit FROM content_hub_assignments WHERE content_id = ? AND hub_pk = ?",
                (str(content_id), str(hub_pk)),
            ).fetchone()
            return row is not None
        finally:
            conn.close()

    def count_for_hub(self, hub_pk: UUID) -> int:
        conn = self._get_conn()
        try:
            return conn.execute(
                "SELECT COUNT(*) AS n FROM content_hub_assignments WHERE hub_pk = ?",
                (str(hub_pk),),
            ).fetchone()["n"]
        finally:
            conn.close()

    def list_hub_content(
        self,
        hub_pk: UUID,
        *,
        assigned: AssignedFilter = "all",
        search: str | None = None,
        status: ContentStatus | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[builtins.list[HubContentItem], int]:
        base = (
            " FROM content c"
            " LEFT JOIN content_hub_assignments a"
            " ON a.content_id = c.id AND a.hub_pk = ?"
            " WHERE 1=1"
        )
        params: builtins.list[Any] = [str(hub_pk)]
        if assigned == "assigned":
            base += " AND a.content_id IS NOT NULL"
        elif assigned == "unassigned":
            base += " AND a.content_id IS NULL"
        if status:
            base += " AND c.status = ?"
            params.append(status)
        if search:
            base += (
                " AND (LOWER(c.title) LIKE ? ESCAPE '\\'"
                " OR LOWER(c.description) LIKE ? ESCAPE '\\')"
            )
            pattern = _like_pattern(search)
            params.extend([pattern, pattern])

        conn = self._get_conn()
        try:
            total = conn.execute("SELECT COUNT(*) AS n" + base, params).fetchone()["n"]
            rows = conn.execute(
                "SELECT c.id, c.title, c.description, c.language, c.status, "
                "c.cover_image_url, c.created_at, "
                "CASE WHEN a.content_id IS NULL THEN 0 ELSE 1 END AS is_assigned"
                + base
                + " ORDER BY c.created_at DESC, c.id LIMIT ? OFFSET ?",
                [*params, limit, offset],
            ).fetchall()
            items = [
                HubContentItem(
                    content_id=UUID(row["id"]),
                    title=row["title"],
                    description=row["description"] or "",
                    language=row["language"] or "",
                    status=row["status"],
                    cover_image_url=row["cover_image_url"],
                    created_at=parse_dt(row["created_at"]) or datetime.min,
                    is_assigned=bool(row["is_assigned"]),
                )
                for row in rows
            ]
            return items, total
        finally:
            conn.close()

