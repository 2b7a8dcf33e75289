"""Tests for the deployment pipeline"""

from dataclasses import replace

from conftest import DummyResponse, DummySession, build_package, default_handler, LISTING
from content_deploy.api import Deployer
from content_deploy.constants import ErrorCode
from content_deploy.models import DeploymentRequest, OperationStatus


def make_request(package_path, instance="both", debug=False, **overrides):
    fields = dict(
        package_path=package_path,
        package_name="mysite",
        group="web",
        project="mysite",
        environment="dev",
        instance=instance,
        pool="kstl",
        debug=debug,
    )
    fields.update(overrides)
    return DeploymentRequest(**fields)


def test_deploys_to_every_target_in_order(config, package, session):
    result = Deployer(config, session=session).deploy(make_request(package))

    assert result.is_success
    assert result.exit_code == 0
    assert [str(r.target) for r in result.target_results] == [
        "a1.example.com:4502",
        "a2.example.com:4512",
        "p1.example.com:4503",
    ]
    assert all(r.installed for r in result.target_results)
    assert [c["url"] for c in session.installs()] == [
        "http://a1.example.com:4502/crx/packmgr/service/.json/etc/packages/web/mysite-1.0.zip",
        "http://a2.example.com:4512/crx/packmgr/service/.json/etc/packages/web/mysite-1.0.zip",
        "http://p1.example.com:4503/crx/packmgr/service/.json/etc/packages/web/mysite-1.0.zip",
    ]


def test_each_target_uploads_before_install(config, package, session):
    Deployer(config, session=session).deploy(make_request(package, instance="author"))

    sequence = [
        ("upload" if "files" in c else "install" if c["method"] == "POST" else "list", c["url"].split("/")[2])
        for c in session.calls
    ]
    assert sequence == [
        ("upload", "a1.example.com:4502"),
        ("list", "a1.example.com:4502"),
        ("install", "a1.example.com:4502"),
        ("upload", "a2.example.com:4512"),
        ("list", "a2.example.com:4512"),
        ("install", "a2.example.com:4512"),
    ]


def test_debug_uploads_but_never_installs(config, package, session):
    result = Deployer(config, session=session).deploy(make_request(package, debug=True))

    assert result.is_success
    assert result.exit_code == 0
    assert len(session.uploads()) == 3
    assert session.installs() == []
    assert all(r.status == OperationStatus.SKIPPED for r in result.target_results)
    assert result.target_results[0].install_url.endswith(
        "/etc/packages/web/mysite-1.0.zip?cmd=install&force=true&recursive=true"
    )


def test_debug_skips_filter_validation(tmp_path, config, session):
    package = build_package(tmp_path / "mysite.zip", roots=["/libs/unapproved"])

    result = Deployer(config, session=session).deploy(make_request(package, debug=True))

    assert result.is_success
    assert len(session.uploads()) == 3


def test_install_failure_stops_remaining_targets(config, package):
    def handler(method, url, kwargs):
        if method == "POST" and "files" not in kwargs and "a2.example.com" in url:
            return DummyResponse(200, '{"success": false, "msg": "error"}')
        return default_handler(method, url, kwargs)

    session = DummySession(handler)

    result = Deployer(config, session=session).deploy(make_request(package))

    assert result.status == OperationStatus.PARTIAL
    assert result.exit_code == 1
    assert [r.status for r in result.target_results] == [
        OperationStatus.SUCCESS,
        OperationStatus.FAILED,
    ]
    assert result.failed_target.target.host == "a2.example.com"
    assert result.error.code == ErrorCode.INSTALL_FAILED
    assert not any("p1.example.com" in c["url"] for c in session.calls)


def test_upload_failure_on_first_target(config, package):
    def handler(method, url, kwargs):
        if "files" in kwargs:
            return DummyResponse(500, "down")
        return default_handler(method, url, kwargs)

    session = DummySession(handler)

    result = Deployer(config, session=session).deploy(make_request(package))

    assert result.status == OperationStatus.FAILED
    assert result.error.code == ErrorCode.UPLOAD_FAILED
    assert len(session.calls) == 1


def test_filter_mismatch_contacts_no_server(tmp_path, config, session):
    package = build_package(tmp_path / "mysite.zip", roots=["/content/mysite", "/libs/core"])

    result = Deployer(config, session=session).deploy(make_request(package))

    assert result.status == OperationStatus.FAILED
    assert result.is_filter_mismatch
    assert result.error.context["unmatched"] == ["/libs/core"]
    assert session.calls == []


def test_missing_filter_definition_fails_gate(tmp_path, config, session):
    package = build_package(tmp_path / "mysite.zip", roots=None)

    result = Deployer(config, session=session).deploy(make_request(package))

    assert result.is_filter_mismatch
    assert session.calls == []


def test_build_not_allowed(config, package, session):
    result = Deployer(config, session=session).deploy(make_request(package, environment="prod"))

    assert result.status == OperationStatus.FAILED
    assert result.error.code == ErrorCode.CONFIG_ERROR
    assert session.calls == []


def test_oversized_package(tmp_path, config, session):
    package = build_package(tmp_path / "mysite.zip")
    small_config = replace(config, max_package_size=0)

    result = Deployer(small_config, session=session).deploy(make_request(package))

    assert result.error.code == ErrorCode.SIZE_EXCEEDED
    assert session.calls == []


def test_missing_listing_entry_uses_fallback_path(config, package):
    def handler(method, url, kwargs):
        if method == "GET":
            return DummyResponse(200, LISTING.replace("<name>mysite</name>", "<name>renamed</name>"))
        return default_handler(method, url, kwargs)

    session = DummySession(handler)

    result = Deployer(config, session=session).deploy(make_request(package, instance="publish"))

    assert result.is_success
    assert session.installs()[0]["url"].endswith("/etc/packages/web/mysite.zip")
    assert any("fallback" in warning for warning in result.warnings)


def test_listing_error_uses_fallback_path(config, package):
    def handler(method, url, kwargs):
        if method == "GET":
            return DummyResponse(502, "bad gateway")
        return default_handler(method, url, kwargs)

    result = Deployer(config, session=DummySession(handler)).deploy(
        make_request(package, instance="publish")
    )

    assert result.is_success
    assert result.target_results[0].location.found is False


def test_exploded_workspace_is_removed(config, package, session, explode_root):
    Deployer(config, session=session).deploy(make_request(package))

    assert list((explode_root / "web" / "mysite").iterdir()) == []


def test_exploded_workspace_is_removed_on_failure(tmp_path, config, session, explode_root):
    package = build_package(tmp_path / "mysite.zip", roots=["/libs/core"])

    Deployer(config, session=session).deploy(make_request(package))

    assert list((explode_root / "web" / "mysite").iterdir()) == []


def test_workspace_deploys_each_zip(tmp_path, config, session):
    workspace = tmp_path / "workspace"
    build_package(workspace / "mysite-a.zip", name="mysite")
    build_package(workspace / "mysite-b.zip", name="mysite")
    (workspace / "notes.txt").write_text("ignored", encoding="utf-8")

    results = Deployer(config, session=session).deploy_workspace(
        workspace, "web", "mysite", "dev", "author", "kstl"
    )

    assert [r.package_name for r in results] == ["mysite-a", "mysite-b"]
    assert all(r.is_success for r in results)
    assert [c["data"]["name"] for c in session.uploads()] == [
        "mysite-a", "mysite-a", "mysite-b", "mysite-b",
    ]


def test_workspace_stops_at_first_failure(tmp_path, config, session):
    workspace = tmp_path / "workspace"
    build_package(workspace / "a.zip", roots=["/libs/core"])
    build_package(workspace / "b.zip")

    results = Deployer(config, session=session).deploy_workspace(
        workspace, "web", "mysite", "dev", "author", "kstl"
    )

    assert len(results) == 1
    assert results[0].is_filter_mismatch
    assert session.calls == []


def test_module_level_deploy(config_file, package, session, monkeypatch):
    from content_deploy import deploy

    monkeypatch.setattr(
        "content_deploy.services.package_manager_client.requests.Session",
        lambda: session,
    )

    result = deploy(package, "mysite", "web", "mysite", "dev", "publish", "kstl",
                    config_path=config_file)

    assert result.is_success
    assert len(session.installs()) == 1


def test_undecodable_reference_is_filter_mismatch(config, package, session, reference_root):
    (reference_root / "web" / "mysite" / "filter.txt").write_bytes(b"/content/mysite\n\xff\xfe\n")

    result = Deployer(config, session=session).deploy(make_request(package))

    assert result.status == OperationStatus.FAILED
    assert result.is_filter_mismatch
    assert session.calls == []
