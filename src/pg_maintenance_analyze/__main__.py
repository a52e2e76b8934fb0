"""Entry point for running pg_maintenance_analyze as a module."""

from pg_maintenance_analyze.server import cli_entry

if __name__ == "__main__":
    cli_entry()
