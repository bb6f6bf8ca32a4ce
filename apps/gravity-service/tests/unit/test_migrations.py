from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

SERVICE_ROOT = Path(__file__).resolve().parents[2]

GRAVITY_TABLES = {
    "group", "adlist", "client", "domainlist",
    "adlist_by_group", "client_by_group", "domainlist_by_group",
}


def _alembic_config(url: str) -> Config:
    # No ini file: keeps alembic from reconfiguring test logging
    cfg = Config()
    cfg.set_main_option("script_location", str(SERVICE_ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", url)
    return cfg


def test_upgrade_and_downgrade(tmp_path, monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    url = f"sqlite:///{tmp_path / 'gravity.db'}"
    cfg = _alembic_config(url)

    command.upgrade(cfg, "head")
    engine = create_engine(url)
    try:
        insp = inspect(engine)
        assert GRAVITY_TABLES <= set(insp.get_table_names())
        assert "idx_domainlist_type" in {ix["name"] for ix in insp.get_indexes("domainlist")}

        command.downgrade(cfg, "base")
        assert not GRAVITY_TABLES & set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
