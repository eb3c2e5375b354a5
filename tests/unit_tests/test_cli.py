from click.testing import CliRunner

from file_manager import cli as cli_module
from file_manager.cli import cli
from file_manager.registry import FileRegistry


def test_show_config(monkeypatch):
    monkeypatch.setenv("S3_BUCKET_NAME", "cli-bucket")
    cli_module.get_settings.cache_clear()
    try:
        result = CliRunner().invoke(cli, ["show-config"])
    finally:
        cli_module.get_settings.cache_clear()

    assert result.exit_code == 0
    assert "S3 Bucket: cli-bucket" in result.output


def test_list_files_and_search(registry: FileRegistry, monkeypatch):
    invoice_key = registry.upload_file(b"%PDF-1.4", "Invoice-2024.pdf", "application/pdf")
    notes_key = registry.upload_file(b"notes", "notes.txt", "text/plain")
    monkeypatch.setattr(cli_module, "build_registry", lambda: registry)

    result = CliRunner().invoke(cli, ["list-files"])
    assert result.exit_code == 0
    assert invoice_key in result.output
    assert notes_key in result.output

    result = CliRunner().invoke(cli, ["search", "INVOICE"])
    assert result.exit_code == 0
    assert invoice_key in result.output
    assert notes_key not in result.output


def test_list_files__empty_bucket(registry: FileRegistry, monkeypatch):
    monkeypatch.setattr(cli_module, "build_registry", lambda: registry)

    result = CliRunner().invoke(cli, ["list-files"])

    assert result.exit_code == 0
    assert "No files found" in result.output
