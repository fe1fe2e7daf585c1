# Tests del CLI
# Ejecutar con: pytest tests/test_cli.py -v

import pytest
from unittest.mock import patch

from insightpilot.adapters.factory import DependencyContainer
from insightpilot.adapters.inbound.cli import main
from insightpilot.adapters.outbound.store import MemoryStore
from insightpilot.core.services.translator import RuleBasedTranslator


@pytest.fixture
def container(adapter_factory):
    container = DependencyContainer(
        store=MemoryStore(),
        adapter_factory=adapter_factory,
        translator_factory=lambda key: RuleBasedTranslator(default_table="users"),
    )
    with patch("insightpilot.adapters.inbound.cli.DependencyContainer", return_value=container):
        yield container


ADD_ARGS = [
    "connections", "add",
    "--name", "Ventas",
    "--kind", "mysql",
    "--host", "db.local",
    "-d", "ventas",
    "-u", "lector",
    "--secret", "s3cr3t",
]


@pytest.mark.unit
class TestCLI:
    """Subcomandos connections, ask y api-key"""

    def test_add_and_list(self, container, capsys):
        assert main(ADD_ARGS) == 0
        assert main(["connections", "list"]) == 0
        out = capsys.readouterr().out
        assert "mysql://db.local:3306/ventas" in out
        assert "s3cr3t" not in out

    def test_validation_error_exit_code(self, container, capsys):
        args = list(ADD_ARGS)
        args[args.index("db.local")] = " "
        assert main(args) == 1
        assert "Error:" in capsys.readouterr().out

    def test_test_and_ask(self, container, capsys):
        main(ADD_ARGS)
        profile_id = container.registry.list()[0].id

        assert main(["connections", "test", profile_id]) == 0
        assert main(["ask", "-c", profile_id, "-q", "list all", "--csv"]) == 0
        out = capsys.readouterr().out
        assert "SELECT * FROM users LIMIT 10;" in out
        assert 'id,name\n"1","Ana"\n"2","Luis"\n' in out

    def test_ask_probes_disconnected_connection(self, container, adapter_factory, capsys):
        main(ADD_ARGS)
        profile_id = container.registry.list()[0].id
        adapter_factory.reachable = False
        assert main(["ask", "-c", profile_id, "-q", "list"]) == 1
        assert "no se pudo conectar" in capsys.readouterr().out

    def test_api_key(self, container, capsys):
        assert main(["api-key", "sk-test"]) == 0
        assert container.registry.openai_api_key == "sk-test"
        assert main(["api-key", "--clear"]) == 0
        assert container.registry.openai_api_key == ""
        assert "sk-test" not in capsys.readouterr().out

    def test_tables(self, container, capsys):
        main(ADD_ARGS)
        profile_id = container.registry.list()[0].id

        assert main(["connections", "tables", profile_id]) == 1
        assert "Error:" in capsys.readouterr().out

        main(["connections", "test", profile_id])
        capsys.readouterr()
        assert main(["connections", "tables", profile_id]) == 0
        assert "public.orders\npublic.users\n" in capsys.readouterr().out
