"""Tests for the Alembic migration setup."""

from unittest.mock import patch

from campus_api.config import settings
from campus_api.core.migrations import get_alembic_config, get_head_revision, main


class TestMigrations:
    def test_config_points_at_sync_url(self):
        config = get_alembic_config()

        assert config.get_main_option("sqlalchemy.url") == settings.database_sync_url
        assert config.get_main_option("script_location").endswith("migrations")

    def test_single_head(self):
        assert get_head_revision() == "0003_settlement_tables"

    def test_console_entry_upgrades_to_head(self):
        with patch("campus_api.core.migrations.command.upgrade") as upgrade:
            main()

        assert upgrade.call_args.args[1] == "head"
