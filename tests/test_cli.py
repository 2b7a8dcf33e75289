"""Tests for the command line interface"""

import json

import pytest
from click.testing import CliRunner

from conftest import DummySession, build_package
from content_deploy.cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def fake_session(monkeypatch):
    session = DummySession()
    monkeypatch.setattr(
        "content_deploy.services.package_manager_client.requests.Session",
        lambda: session,
    )
    return session


def test_help_exits_non_zero(runner):
    result = runner.invoke(cli, ["deploy", "--help"])

    assert result.exit_code == 1
    assert "PACKAGE_PATH" in result.output


def test_servers(runner, config_file):
    result = runner.invoke(cli, ["--config", str(config_file), "servers", "dev", "both", "kstl"])

    assert result.exit_code == 0
    assert "a1.example.com" in result.output
    assert "p1.example.com" in result.output
    assert "dev_kstl_aem_authors" in result.output
    assert "dev_kstl_aem_publishers" in result.output


def test_config_from_environment(runner, config_file, monkeypatch):
    monkeypatch.setenv("SERVER_CONFIG", str(config_file))

    result = runner.invoke(cli, ["servers", "dev", "author", "kstl"])

    assert result.exit_code == 0
    assert "a2.example.com" in result.output


def test_servers_unknown_pool(runner, config_file):
    result = runner.invoke(cli, ["--config", str(config_file), "servers", "dev", "author", "wdc"])

    assert result.exit_code == 1


def test_missing_config(runner, tmp_path, package):
    result = runner.invoke(cli, [
        "--config", str(tmp_path / "absent.properties"),
        "deploy", str(package), "mysite", "web", "mysite", "dev", "author", "kstl",
    ])

    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_deploy(runner, config_file, package, fake_session):
    result = runner.invoke(cli, [
        "--config", str(config_file),
        "deploy", str(package), "mysite", "web", "mysite", "dev", "both", "kstl",
    ])

    assert result.exit_code == 0
    assert len(fake_session.installs()) == 3


def test_deploy_debug(runner, config_file, package, fake_session):
    result = runner.invoke(cli, [
        "--config", str(config_file),
        "deploy", str(package), "mysite", "web", "mysite", "dev", "both", "kstl", "--debug",
    ])

    assert result.exit_code == 0
    assert len(fake_session.uploads()) == 3
    assert fake_session.installs() == []


def test_deploy_filter_mismatch(runner, tmp_path, config_file, fake_session):
    package = build_package(tmp_path / "mysite.zip", roots=["/libs/core"])

    result = runner.invoke(cli, [
        "--config", str(config_file),
        "deploy", str(package), "mysite", "web", "mysite", "dev", "both", "kstl",
    ])

    assert result.exit_code == 1
    assert "Filter Mismatch" in result.output
    assert fake_session.calls == []


def test_deploy_workspace(runner, tmp_path, config_file, fake_session):
    workspace = tmp_path / "workspace"
    build_package(workspace / "mysite-a.zip")
    build_package(workspace / "mysite-b.zip")

    result = runner.invoke(cli, [
        "--config", str(config_file),
        "deploy-workspace", str(workspace), "web", "mysite", "dev", "publish", "kstl",
    ])

    assert result.exit_code == 0
    assert len(fake_session.installs()) == 2


def test_deploy_workspace_without_packages(runner, tmp_path, config_file):
    (tmp_path / "empty").mkdir()

    result = runner.invoke(cli, [
        "--config", str(config_file),
        "deploy-workspace", str(tmp_path / "empty"), "web", "mysite", "dev", "publish", "kstl",
    ])

    assert result.exit_code == 1


def test_check_filter_approved(runner, package, reference_root):
    result = runner.invoke(cli, [
        "check-filter", str(package), "web", "mysite", "--reference-root", str(reference_root),
    ])

    assert result.exit_code == 0
    assert result.output.strip().splitlines()[-1] == "1"


def test_check_filter_rejected(runner, tmp_path, reference_root):
    package = build_package(tmp_path / "mysite.zip", roots=["/libs/core"])

    result = runner.invoke(cli, [
        "check-filter", str(package), "web", "mysite", "--reference-root", str(reference_root),
    ])

    assert result.exit_code == 1
    assert result.output.strip().splitlines()[-1] == "0"


def test_check_filter_uses_configured_reference_root(runner, config_file, package):
    result = runner.invoke(cli, ["--config", str(config_file), "check-filter", str(package), "web", "mysite"])

    assert result.exit_code == 0


def test_check_filter_undecodable_reference(runner, package, reference_root):
    (reference_root / "web" / "mysite" / "filter.txt").write_bytes(b"\xff\xfe/content/mysite\n")

    result = runner.invoke(cli, [
        "check-filter", str(package), "web", "mysite", "--reference-root", str(reference_root),
    ])

    assert result.exit_code == 1
    assert result.output.strip().splitlines()[-1] == "0"


def test_undecodable_config_reports_configuration_error(runner, tmp_path, package):
    config_file = tmp_path / "server.properties"
    config_file.write_bytes(b"CRX_UPLOAD_PATH=/x\nfoo=\xff\n")

    result = runner.invoke(cli, [
        "--config", str(config_file),
        "deploy", str(package), "mysite", "web", "mysite", "dev", "author", "kstl",
    ])

    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_deploy_json_output(runner, config_file, package, fake_session):
    result = runner.invoke(cli, [
        "--config", str(config_file),
        "deploy", str(package), "mysite", "web", "mysite", "dev", "author", "kstl", "--json",
    ])

    assert result.exit_code == 0
    data = json.loads(result.output[result.output.index("{\n"):])
    assert data["status"] == "success"
    assert [t["host"] for t in data["targets"]] == ["a1.example.com", "a2.example.com"]
    assert data["target_results"][0]["location"]["package_path"] == "/etc/packages/web/mysite-1.0.zip"
    assert data["errors"] == []


def test_deploy_json_output_on_filter_mismatch(runner, tmp_path, config_file, fake_session):
    package = build_package(tmp_path / "mysite.zip", roots=["/libs/core"])

    result = runner.invoke(cli, [
        "--config", str(config_file),
        "deploy", str(package), "mysite", "web", "mysite", "dev", "both", "kstl", "--json",
    ])

    assert result.exit_code == 1
    data = json.loads(result.output[result.output.index("{\n"):])
    assert data["status"] == "failed"
    assert data["errors"][0]["kind"] == "FilterMismatchError"
    assert data["errors"][0]["context"]["unmatched"] == ["/libs/core"]
