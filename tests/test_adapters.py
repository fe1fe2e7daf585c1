# Tests de adaptadores de base de datos (drivers mockeados)
# Ejecutar con: pytest tests/test_adapters.py -v

import pytest
from unittest.mock import MagicMock, patch

from insightpilot.adapters.outbound.database import (
    MySQLAdapter,
    PostgreSQLAdapter,
    SQLServerAdapter,
    get_database_adapter,
)
from insightpilot.core.domain.connection import BackendKind, ConnectionProfile
from insightpilot.core.domain.errors import BackendExecutionError


def make_profile(kind=BackendKind.POSTGRESQL, **overrides):
    data = dict(
        name="test",
        kind=kind,
        host="db.local",
        port=5432,
        database="ventas",
        username="lector",
        secret="s3cr3t",
    )
    data.update(overrides)
    return ConnectionProfile(**data)


def fake_connection(description=None, rows=None, error=None):
    conn = MagicMock()
    cursor = conn.cursor.return_value
    cursor.description = description
    cursor.fetchall.return_value = rows or []
    if error is not None:
        cursor.execute.side_effect = error
    return conn


@pytest.mark.unit
class TestDatabaseAdapter:
    """Contrato execute/test_connection"""

    def test_factory_by_kind(self):
        assert isinstance(get_database_adapter(make_profile()), PostgreSQLAdapter)
        assert isinstance(get_database_adapter(make_profile(BackendKind.MYSQL)), MySQLAdapter)
        assert isinstance(
            get_database_adapter(make_profile(BackendKind.SQLSERVER)), SQLServerAdapter
        )

    def test_execute_returns_columns_and_data(self):
        conn = fake_connection(
            description=[("id",), ("name",)], rows=[(1, "Ana"), (2, "Luis")]
        )
        adapter = MySQLAdapter(make_profile(BackendKind.MYSQL))
        with patch.object(MySQLAdapter, "connect", return_value=conn):
            result = adapter.execute("SELECT id, name FROM users")
        assert result == {
            "columns": ["id", "name"],
            "data": [(1, "Ana"), (2, "Luis")],
            "row_count": 2,
        }
        conn.close.assert_called_once()

    def test_execute_error_is_returned(self):
        conn = fake_connection(error=RuntimeError("syntax error"))
        adapter = MySQLAdapter(make_profile(BackendKind.MYSQL))
        with patch.object(MySQLAdapter, "connect", return_value=conn):
            result = adapter.execute("SELEC")
        assert result == {"error": "syntax error"}
        conn.close.assert_called_once()

    def test_connect_error_is_returned(self):
        adapter = MySQLAdapter(make_profile(BackendKind.MYSQL))
        with patch.object(MySQLAdapter, "connect", side_effect=OSError("refused")):
            assert adapter.execute("SELECT 1") == {"error": "refused"}
            assert adapter.test_connection() is False

    def test_postgresql_sets_statement_timeout(self):
        conn = fake_connection(description=[("?column?",)], rows=[(1,)])
        with patch("psycopg2.connect", return_value=conn) as connect:
            adapter = PostgreSQLAdapter(make_profile(), timeout=2.5)
            assert adapter.test_connection() is True

        kwargs = connect.call_args.kwargs
        assert kwargs["connect_timeout"] == 3
        assert kwargs["password"] == "s3cr3t"
        conn.set_session.assert_called_once_with(readonly=True)
        executed = [c.args[0] for c in conn.cursor.return_value.execute.call_args_list]
        assert executed == ["SET statement_timeout = 2500;", "SELECT 1"]

    def test_sqlserver_connection_string_escapes_values(self):
        adapter = SQLServerAdapter(
            make_profile(BackendKind.SQLSERVER, port=1433, secret="p}w;d")
        )
        conn_str = adapter.connection_string()
        assert "SERVER=db.local,1433;" in conn_str
        assert "PWD={p}}w;d}" in conn_str
        assert conn_str.startswith("DRIVER={ODBC Driver 17 for SQL Server};")


@pytest.mark.unit
class TestListTables:
    """Catálogo de tablas vía information_schema"""

    def test_mysql_lists_current_database(self):
        conn = fake_connection(description=[("table_name",)], rows=[("orders",), ("users",)])
        adapter = MySQLAdapter(make_profile(BackendKind.MYSQL))
        with patch.object(MySQLAdapter, "connect", return_value=conn):
            assert adapter.list_tables() == ["orders", "users"]
        query = conn.cursor.return_value.execute.call_args.args[0]
        assert "information_schema.tables" in query
        assert "DATABASE()" in query

    def test_postgresql_qualifies_schema(self):
        conn = fake_connection(description=[("name",)], rows=[("public.users",)])
        with patch("psycopg2.connect", return_value=conn):
            assert PostgreSQLAdapter(make_profile()).list_tables() == ["public.users"]
        query = conn.cursor.return_value.execute.call_args.args[0]
        assert "pg_catalog" in query

    def test_sqlserver_query(self):
        conn = fake_connection(description=[("name",)], rows=[("dbo.Orders",)])
        adapter = SQLServerAdapter(make_profile(BackendKind.SQLSERVER, port=1433))
        with patch.object(SQLServerAdapter, "connect", return_value=conn):
            assert adapter.list_tables() == ["dbo.Orders"]
        query = conn.cursor.return_value.execute.call_args.args[0]
        assert "INFORMATION_SCHEMA.TABLES" in query

    def test_driver_error_raises(self):
        adapter = MySQLAdapter(make_profile(BackendKind.MYSQL))
        with patch.object(MySQLAdapter, "connect", side_effect=OSError("refused")):
            with pytest.raises(BackendExecutionError) as exc:
                adapter.list_tables()
        assert exc.value.message == "refused"
