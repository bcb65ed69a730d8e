"""
Consistency tests for the Alembic migrations.

The initial migration is executed against a mocked ``op`` and compared with
the ORM metadata, so a model change without a migration shows up here.
"""

import importlib.util
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import sqlalchemy as sa

from admissions.core.database import Base
from admissions.modules.applications.models import ApplicationStatus
from admissions.modules.calendar.models import CalendarEventType
from admissions.modules.notifications.models import NotificationType

VERSIONS_DIR = Path(__file__).resolve().parents[1] / "alembic" / "versions"


def _load_migration(filename: str):
    spec = importlib.util.spec_from_file_location(
        filename.removesuffix(".py"), VERSIONS_DIR / filename
    )
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def initial_migration():
    module = _load_migration("3f9a1c2b7d10_create_admissions_tables.py")
    module.op = MagicMock()
    # Enum DDL is a no-op on dialects without native enums
    module.op.get_bind.return_value.dialect.supports_native_enum = False
    return module


class TestInitialMigration:
    def test_is_the_root_revision(self, initial_migration):
        assert initial_migration.down_revision is None

    def test_tables_match_models(self, initial_migration):
        initial_migration.upgrade()

        created = {}
        for call in initial_migration.op.create_table.call_args_list:
            name, *elements = call.args
            created[name] = {e.name for e in elements if isinstance(e, sa.Column)}

        assert set(created) == set(Base.metadata.tables)
        for name, columns in created.items():
            assert columns == set(Base.metadata.tables[name].columns.keys()), name

    def test_indexes_match_models(self, initial_migration):
        initial_migration.upgrade()

        created = {call.args[0] for call in initial_migration.op.create_index.call_args_list}
        declared = {
            index.name for table in Base.metadata.tables.values() for index in table.indexes
        }

        assert created == declared

    def test_enum_values_match_models(self, initial_migration):
        assert initial_migration.APPLICATION_STATUSES == tuple(s.value for s in ApplicationStatus)
        assert initial_migration.NOTIFICATION_TYPES == tuple(t.value for t in NotificationType)
        assert initial_migration.CALENDAR_EVENT_TYPES == tuple(t.value for t in CalendarEventType)

    def test_downgrade_drops_every_table(self, initial_migration):
        initial_migration.downgrade()

        dropped = {call.args[0] for call in initial_migration.op.drop_table.call_args_list}
        assert dropped == set(Base.metadata.tables)
