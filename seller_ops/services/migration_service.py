import logging
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from seller_ops.config import get_settings
from seller_ops.core.constants import PROJECT_ROOT

logger = logging.getLogger(__name__)


def migrations_dir() -> Path:
    directory = Path(get_settings().MIGRATIONS_DIR)
    if not directory.is_absolute():
        directory = PROJECT_ROOT / directory
    return directory.resolve()


def list_migrations() -> list[str]:
    directory = migrations_dir()
    if not directory.is_dir():
        return []
    return sorted(path.name for path in directory.glob("*.sql"))


def resolve_migration(name: str) -> Path:
    if not name or not str(name).strip():
        raise ValueError("Migration file name is required")
    directory = migrations_dir()
    candidate = (directory / str(name).strip()).resolve()
    if candidate.parent != directory or candidate.suffix.lower() != ".sql":
        raise ValueError("Invalid migration file name")
    if not candidate.is_file():
        raise LookupError("Migration file not found: {}".format(candidate.name))
    return candidate


def split_sql_statements(sql: str) -> list[str]:
    """Split a script on top-level semicolons.

    Quoted strings, quoted identifiers, ``$$``/``$tag$`` bodies and comments
    are kept intact; comment-only fragments are dropped.
    """
    statements = []
    current = []
    i = 0
    length = len(sql)
    quote = None
    dollar_tag = None
    has_code = False

    while i < length:
        char = sql[i]
        if dollar_tag is not None:
            if sql.startswith(dollar_tag, i):
                current.append(dollar_tag)
                i += len(dollar_tag)
                dollar_tag = None
                continue
            current.append(char)
            i += 1
            continue
        if quote is not None:
            current.append(char)
            if char == quote:
                if i + 1 < length and sql[i + 1] == quote:
                    current.append(sql[i + 1])
                    i += 2
                    continue
                quote = None
            i += 1
            continue
        if char in ("'", '"'):
            quote = char
            has_code = True
            current.append(char)
            i += 1
            continue
        if sql.startswith("--", i):
            end = sql.find("\n", i)
            end = length if end == -1 else end
            current.append(sql[i:end])
            i = end
            continue
        if sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            end = length if end == -1 else end + 2
            current.append(sql[i:end])
            i = end
            continue
        if char == "$":
            end = sql.find("$", i + 1)
            tag_body = sql[i + 1:end] if end != -1 else None
            if tag_body is not None and (
                tag_body == "" or (not tag_body[0].isdigit() and tag_body.replace("_", "").isalnum())
            ):
                dollar_tag = sql[i:end + 1]
                current.append(dollar_tag)
                has_code = True
                i = end + 1
                continue
        if char == ";":
            if has_code:
                statements.append("".join(current).strip())
            current = []
            has_code = False
            i += 1
            continue
        if not char.isspace():
            has_code = True
        current.append(char)
        i += 1

    if has_code:
        statements.append("".join(current).strip())
    return statements


def apply_sql(db: Session, sql: str) -> int:
    statements = split_sql_statements(sql)
    if not statements:
        raise ValueError("Migration contains no SQL statements")
    try:
        for statement in statements:
            db.connection().exec_driver_sql(statement)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    return len(statements)


def apply_migration(db: Session, name: str) -> dict:
    path = resolve_migration(name)
    sql = path.read_text(encoding="utf-8")
    count = apply_sql(db, sql)
    logger.info("Applied migration %s (%d statement(s))", path.name, count)
    return {"migration": path.name, "statements": count}
