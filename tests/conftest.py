"""Shared fixtures for content-deploy tests"""

import zipfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

import pytest

from content_deploy.services import load_config

CONFIG_TEMPLATE = """\
# package manager endpoints
CRX_UPLOAD_PATH=/crx/packmgr/service.jsp
CRX_INSTALL_PREFIX=/crx/packmgr/service/.json
PKG_BASE_PATH=/etc/packages
EXPLODE_ROOT={explode_root}
DEFAULT_AUTHOR_PORT=4502
DEFAULT_PUBLISH_PORT=4503
aem_build_user="builder:s3cret"
max_package_size=10MB
REFERENCE_FILTER_ROOT={reference_root}

dev_build_allowed=true
prod_build_allowed=false

dev_kstl_aem_authors=a1.example.com,a2.example.com:4512
dev_kstl_aem_publishers=p1.example.com
"""

UPLOAD_OK = '<crx version="1.0"><response><status code="200">ok</status></response></crx>'
INSTALL_OK = '{"success": true, "msg": "Package installed"}'

LISTING = """\
<?xml version="1.0" encoding="utf-8"?>
<crx version="1.0">
  <response>
    <data>
      <packages>
        <package>
          <group>other</group>
          <name>unrelated</name>
          <version>3.0</version>
        </package>
        <package>
          <group>web</group>
          <name>mysite</name>
          <version>1.0</version>
        </package>
      </packages>
    </data>
    <status code="200">ok</status>
  </response>
</crx>
"""


class DummyResponse:
    """Minimal stand-in for requests.Response"""

    def __init__(self, status_code: int = 200, text: str = "", content: Optional[bytes] = None) -> None:
        self.status_code = status_code
        self.text = text
        self.content = text.encode("utf-8") if content is None else content


class DummySession:
    """Records calls and answers them through a handler

    The handler receives (method, url, kwargs) and returns a DummyResponse,
    or raises to simulate a transport error.
    """

    def __init__(self, handler: Optional[Callable[[str, str, Dict[str, Any]], DummyResponse]] = None) -> None:
        self.handler = handler or default_handler
        self.calls: List[Dict[str, Any]] = []

    def _call(self, method: str, url: str, **kwargs: Any) -> DummyResponse:
        record = {"method": method, "url": url}
        record.update(kwargs)
        if "files" in kwargs:
            record["file_name"] = kwargs["files"]["file"][0]
        self.calls.append(record)
        return self.handler(method, url, kwargs)

    def get(self, url: str, **kwargs: Any) -> DummyResponse:
        return self._call("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> DummyResponse:
        return self._call("POST", url, **kwargs)

    def uploads(self) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["method"] == "POST" and "files" in c]

    def installs(self) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["method"] == "POST" and "/service/.json" in c["url"]]

    def listings(self) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["method"] == "GET"]


def default_handler(method: str, url: str, kwargs: Dict[str, Any]) -> DummyResponse:
    if method == "GET":
        return DummyResponse(200, LISTING)
    if "files" in kwargs:
        return DummyResponse(200, UPLOAD_OK)
    return DummyResponse(200, INSTALL_OK)


def build_package(path: Path,
                  name: Optional[str] = "mysite",
                  roots: Optional[Sequence[str]] = ("/content/mysite",),
                  filter_xml: Optional[str] = None) -> Path:
    """Write a content package archive

    `name=None` omits properties.xml, `roots=None` omits filter.xml.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("jcr_root/content/.content.xml", "<jcr:root/>")

        if name is not None:
            archive.writestr(
                "META-INF/vault/properties.xml",
                '<?xml version="1.0" encoding="utf-8"?>\n'
                "<properties>\n"
                f'<entry key="name">{name}</entry>\n'
                '<entry key="version">1.0</entry>\n'
                "</properties>\n"
            )

        if filter_xml is not None:
            archive.writestr("META-INF/vault/filter.xml", filter_xml)
        elif roots is not None:
            filters = "\n".join(f'    <filter root="{root}"/>' for root in roots)
            archive.writestr(
                "META-INF/vault/filter.xml",
                '<?xml version="1.0" encoding="UTF-8"?>\n'
                '<workspaceFilter version="1.0">\n'
                f"{filters}\n"
                "</workspaceFilter>\n"
            )

    return path


@pytest.fixture
def explode_root(tmp_path: Path) -> Path:
    return tmp_path / "explode"


@pytest.fixture
def reference_root(tmp_path: Path) -> Path:
    root = tmp_path / "reference"
    filter_txt = root / "web" / "mysite" / "filter.txt"
    filter_txt.parent.mkdir(parents=True)
    filter_txt.write_text("/content/mysite\n\n/apps/mysite\n", encoding="utf-8")
    return root


@pytest.fixture
def config_file(tmp_path: Path, explode_root: Path, reference_root: Path) -> Path:
    path = tmp_path / "server.properties"
    path.write_text(
        CONFIG_TEMPLATE.format(explode_root=explode_root, reference_root=reference_root),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def config(config_file: Path):
    return load_config(config_file)


@pytest.fixture
def package(tmp_path: Path) -> Path:
    return build_package(tmp_path / "build" / "mysite-1.0.zip")


@pytest.fixture
def session() -> DummySession:
    return DummySession()


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SERVER_CONFIG", raising=False)
