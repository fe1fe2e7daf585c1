# CLI Adapter - Entry point por línea de comandos

import sys
import asyncio
import logging
import argparse
from getpass import getpass

from insightpilot.config.settings import settings
from insightpilot.adapters.factory import DependencyContainer
from insightpilot.core.domain.connection import BackendKind, ConnectionProfile
from insightpilot.core.domain.errors import InsightPilotError
from insightpilot.core.services.export import to_delimited_text
from insightpilot.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="insightpilot",
        description=f"{settings.app_name} - Consultas en lenguaje natural sobre tus bases de datos",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # connections
    conn = sub.add_parser("connections", help="Gestiona perfiles de conexión")
    conn_sub = conn.add_subparsers(dest="action", required=True)

    conn_sub.add_parser("list", help="Lista las conexiones")

    add = conn_sub.add_parser("add", help="Agrega una conexión")
    add.add_argument("--name", default="", help="Nombre para mostrar")
    add.add_argument("--kind", required=True, choices=[k.value for k in BackendKind])
    add.add_argument("--host", required=True)
    add.add_argument("--port", type=int, help="Puerto (por defecto el del motor)")
    add.add_argument("--database", "-d", required=True)
    add.add_argument("--username", "-u", required=True)
    add.add_argument("--secret", help="Contraseña (si se omite se pide por consola)")

    update = conn_sub.add_parser("update", help="Edita una conexión")
    update.add_argument("id")
    update.add_argument("--name")
    update.add_argument("--kind", choices=[k.value for k in BackendKind])
    update.add_argument("--host")
    update.add_argument("--port", type=int)
    update.add_argument("--database", "-d")
    update.add_argument("--username", "-u")
    update.add_argument("--secret")

    remove = conn_sub.add_parser("remove", help="Elimina una conexión")
    remove.add_argument("id")

    test = conn_sub.add_parser("test", help="Prueba una conexión")
    test.add_argument("id")

    tables = conn_sub.add_parser("tables", help="Lista las tablas de una conexión activa")
    tables.add_argument("id")

    # ask
    ask = sub.add_parser("ask", help="Pregunta en lenguaje natural")
    ask.add_argument("--connection", "-c", required=True, help="ID de la conexión")
    ask.add_argument("--query", "-q", help="Consulta en lenguaje natural")
    ask.add_argument("--table", "-t", help="Tabla sugerida")
    ask.add_argument("--csv", action="store_true", help="Imprime el resultado como CSV")
    ask.add_argument("--delimiter", default=",", help="Delimitador para --csv")

    # api-key
    key = sub.add_parser("api-key", help="Guarda o elimina la API key de OpenAI")
    key.add_argument("key", nargs="?", default=None)
    key.add_argument("--clear", action="store_true", help="Elimina la API key guardada")

    # serve
    serve = sub.add_parser("serve", help="Inicia la API REST")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")

    return parser


def print_profile(profile: ConnectionProfile):
    print(f"{profile.id}  {profile.status.value:<12} {profile.describe()}")


def print_profiles(profiles):
    if not profiles:
        print("No hay conexiones configuradas.")
        return
    for p in profiles:
        print_profile(p)


def print_table(result):
    if result.is_empty:
        print("(sin resultados)")
        return
    print(" | ".join(result.columns))
    print("-" * 50)
    for row in result.rows:
        print(" | ".join("" if v is None else str(v) for v in row.values()))
    print(f"\n{result.row_count} filas")


def run_connections(args, container: DependencyContainer) -> int:
    registry = container.registry

    if args.action == "list":
        print_profiles(registry.list())
    elif args.action == "add":
        secret = args.secret if args.secret is not None else getpass("Contraseña: ")
        profile = registry.add(
            name=args.name,
            kind=args.kind,
            host=args.host,
            port=args.port,
            database=args.database,
            username=args.username,
            secret=secret,
        )
        print_profile(profile)
    elif args.action == "update":
        fields = {
            f: getattr(args, f)
            for f in ("name", "kind", "host", "port", "database", "username", "secret")
            if getattr(args, f) is not None
        }
        if not fields:
            print("Nada que actualizar.")
            return 1
        print_profile(registry.update(args.id, **fields))
    elif args.action == "remove":
        registry.delete(args.id)
        print(f"Eliminada: {args.id}")
    elif args.action == "test":
        ok = asyncio.run(container.probe.test(args.id))
        print_profile(registry.get(args.id))
        return 0 if ok else 1
    elif args.action == "tables":
        names = asyncio.run(container.catalog.list_tables(args.id))
        if not names:
            print("(sin tablas)")
        for name in names:
            print(name)
    return 0


async def run_ask(args, container: DependencyContainer) -> int:
    registry = container.registry
    profile = registry.get(args.connection)
    if not profile.is_connected:
        print(f"Probando conexión {profile.describe()}...")
        if not await container.probe.test(profile.id):
            print("Error: no se pudo conectar.")
            return 1

    query = args.query or input("Consulta: ").strip()
    if not query:
        print("Error: Query requerida")
        return 1

    session = container.session_manager.create_session()
    turn = await session.ask(profile.id, query, args.table)

    print(f"\n{'=' * 50}")
    print(f"Query: {query}")
    print(f"SQL: {turn.query}")
    print(f"{'=' * 50}")
    if not turn.is_success:
        print(f"Error: {turn.error.message}")
        return 1
    if args.csv:
        sys.stdout.write(to_delimited_text(turn.result, delimiter=args.delimiter))
    else:
        print_table(turn.result)
    return 0


def run_api_key(args, container: DependencyContainer) -> int:
    registry = container.registry
    if args.clear:
        registry.set_openai_api_key("")
        print("API key eliminada.")
        return 0
    key = args.key if args.key is not None else getpass("API key de OpenAI: ")
    registry.set_openai_api_key(key)
    print("API key guardada." if registry.openai_api_key else "API key eliminada.")
    return 0


def run_serve(args) -> int:
    import uvicorn

    uvicorn.run(
        "insightpilot.adapters.inbound.api:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()

    if args.command == "serve":
        return run_serve(args)

    container = DependencyContainer()
    try:
        if args.command == "connections":
            return run_connections(args, container)
        if args.command == "ask":
            return asyncio.run(run_ask(args, container))
        if args.command == "api-key":
            return run_api_key(args, container)
    except InsightPilotError as e:
        logger.debug(f"{e.code}: {e.details}")
        print(f"Error: {e.message}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
