"""Tests for package metadata"""

import content_deploy


def test_version_info_matches_version():
    assert ".".join(str(part) for part in content_deploy.__version_info__) == content_deploy.__version__


def test_project_metadata():
    assert content_deploy.__author__ == "content-deploy maintainers"
    assert content_deploy.__license__ == "MIT"
    assert not hasattr(content_deploy, "__email__")
