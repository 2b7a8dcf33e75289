"""Tests for target resolution"""

import pytest

from content_deploy.api.exceptions import ConfigError
from content_deploy.core import ConfigResolver, parse_build_flag
from content_deploy.models import DeployConfig, DeploymentTarget, InstanceRole

BASE = {
    "CRX_UPLOAD_PATH": "/crx/packmgr/service.jsp",
    "CRX_INSTALL_PREFIX": "/crx/packmgr/service/.json",
    "PKG_BASE_PATH": "/etc/packages",
    "EXPLODE_ROOT": "/tmp/explode",
    "DEFAULT_AUTHOR_PORT": "4502",
    "DEFAULT_PUBLISH_PORT": "4503",
    "aem_build_user": "builder:s3cret",
}


def make_resolver(**extra):
    return ConfigResolver(DeployConfig.from_dict(dict(BASE, **extra)))


def test_both_lists_authors_then_publishers(config):
    targets, allowed = ConfigResolver(config).resolve("dev", "kstl", "both")

    assert allowed is True
    assert targets == [
        DeploymentTarget("a1.example.com", 4502, InstanceRole.AUTHOR),
        DeploymentTarget("a2.example.com", 4512, InstanceRole.AUTHOR),
        DeploymentTarget("p1.example.com", 4503, InstanceRole.PUBLISH),
    ]


def test_single_role_uses_default_port(config):
    targets, _ = ConfigResolver(config).resolve("DEV", "KSTL", "publish")

    assert [str(t) for t in targets] == ["p1.example.com:4503"]


def test_duplicate_hosts_are_kept():
    resolver = make_resolver(
        dev_build_allowed="true",
        dev_kstl_aem_authors="a1,a1, ,a2",
    )

    targets, _ = resolver.resolve("dev", "kstl", "author")

    assert [t.host for t in targets] == ["a1", "a1", "a2"]


def test_both_with_only_author_list():
    resolver = make_resolver(dev_build_allowed="true", dev_kstl_aem_authors="a1")

    targets, _ = resolver.resolve("dev", "kstl", "both")

    assert [t.role for t in targets] == [InstanceRole.AUTHOR]


def test_build_not_allowed():
    resolver = make_resolver(prod_build_allowed="false", prod_kstl_aem_authors="a1")

    _, allowed = resolver.resolve("prod", "kstl", "author")

    assert allowed is False


def test_environment_token_mapping():
    resolver = make_resolver(
        qa_build_allowed="yes",
        qa_env_token="dev",
        dev_kstl_aem_publishers="p1",
    )

    targets, allowed = resolver.resolve("qa", "kstl", "publish")

    assert allowed is True
    assert [t.host for t in targets] == ["p1"]


def test_unknown_role(config):
    with pytest.raises(ConfigError, match="Unknown instance"):
        ConfigResolver(config).resolve("dev", "kstl", "dispatcher")


def test_missing_server_key_names_expected_key(config):
    with pytest.raises(ConfigError) as exc:
        ConfigResolver(config).resolve("dev", "wdc", "author")

    assert "dev_wdc_aem_author" in str(exc.value)


def test_empty_server_list():
    resolver = make_resolver(dev_build_allowed="true", dev_kstl_aem_authors=" , ")

    with pytest.raises(ConfigError, match="No servers found"):
        resolver.resolve("dev", "kstl", "author")


def test_missing_build_flag():
    resolver = make_resolver(dev_kstl_aem_authors="a1")

    with pytest.raises(ConfigError, match="dev_build_allowed"):
        resolver.resolve("dev", "kstl", "author")


@pytest.mark.parametrize("value, expected", [
    ("true", True),
    ("FALSE", False),
    ("1", True),
    ("no", False),
    ("false,true", True),
    ("0, no", False),
])
def test_parse_build_flag(value, expected):
    assert parse_build_flag(value, "dev_build_allowed") is expected


def test_parse_build_flag_rejects_unknown_literal():
    with pytest.raises(ConfigError, match="maybe"):
        parse_build_flag("maybe", "dev_build_allowed")


def test_build_flag_key_is_case_insensitive():
    resolver = make_resolver(DEV_Build_Allowed="true", dev_kstl_aem_authors="a1")

    _, allowed = resolver.resolve("dev", "kstl", "author")

    assert allowed is True


def test_lowercase_build_flag_key_wins():
    resolver = make_resolver(
        DEV_BUILD_ALLOWED="true",
        dev_build_allowed="false",
        dev_kstl_aem_authors="a1",
    )

    _, allowed = resolver.resolve("dev", "kstl", "author")

    assert allowed is False


@pytest.mark.parametrize("role, expected", [
    (InstanceRole.AUTHOR, ["dev_kstl_aem_authors"]),
    (InstanceRole.BOTH, ["dev_kstl_aem_authors", "dev_kstl_aem_publishers"]),
])
def test_source_keys(config, role, expected):
    assert ConfigResolver(config).source_keys("DEV", "KSTL", role) == expected
