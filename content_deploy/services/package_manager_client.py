"""HTTP client for the repository package manager service"""

import json
import logging
import re
from typing import Optional
from urllib.parse import quote, urlencode

import requests

from ..api.exceptions import RemoteDiscoveryAmbiguous, UploadFailure, InstallFailure
from ..constants import LIST_COMMAND, INSTALL_PARAMS, RESPONSE_EXCERPT_LENGTH
from ..models.artifact import PackageArtifact
from ..models.config import DeployConfig
from ..models.target import DeploymentTarget

logger = logging.getLogger(__name__)

STATUS_CODE_PATTERN = re.compile(r'<status\s+code="(\d+)"')


def excerpt(body: str) -> str:
    """Truncate a response body for log output"""
    body = body or ""
    if len(body) > RESPONSE_EXCERPT_LENGTH:
        return body[:RESPONSE_EXCERPT_LENGTH] + "..."
    return body


def is_install_success(body: str, token: str = "success") -> bool:
    """Check an install response for a success indicator

    JSON bodies carrying a `success` field are judged by that field, so
    `{"success": false}` is a failure. Anything else must contain the
    success token (case-insensitive).
    """
    if not body:
        return False

    try:
        data = json.loads(body)
    except ValueError:
        data = None

    if isinstance(data, dict) and "success" in data:
        return data["success"] is True or str(data["success"]).lower() == "true"

    return token.lower() in body.lower()


class PackageManagerClient:
    """Authenticated calls against a target's package manager"""

    def __init__(self, config: DeployConfig, session: Optional[requests.Session] = None):
        """
        Initialize client

        Args:
            config: Deployment configuration (paths, credentials, timeout)
            session: HTTP session, a new one is created if omitted
        """
        self.config = config
        self.session = session or requests.Session()
        self.auth = config.credentials.as_auth()
        self.timeout = config.http_timeout

    def service_url(self, target: DeploymentTarget) -> str:
        """Get the package manager service URL of a target"""
        return f"{target.base_url}{self.config.upload_path}"

    def install_endpoint(self, target: DeploymentTarget, package_path: str) -> str:
        """Install endpoint for a package path, without query string"""
        return f"{target.base_url}{self.config.install_prefix}{quote(package_path, safe='/')}"

    def install_url(self, target: DeploymentTarget, package_path: str) -> str:
        """Full install URL including the install flags"""
        return f"{self.install_endpoint(target, package_path)}?{urlencode(INSTALL_PARAMS)}"

    def list_packages(self, target: DeploymentTarget) -> bytes:
        """Fetch the package listing of a target

        The raw body is returned so the XML declaration decides the encoding.

        Raises:
            RemoteDiscoveryAmbiguous: If the listing cannot be retrieved
        """
        url = self.service_url(target)
        logger.debug(f"Listing packages on {target}: {url}")

        try:
            response = self.session.get(
                url,
                params={"cmd": LIST_COMMAND},
                auth=self.auth,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise RemoteDiscoveryAmbiguous(
                f"Package listing request to {target} failed: {e}", target
            )

        if response.status_code >= 400:
            raise RemoteDiscoveryAmbiguous(
                f"Package listing on {target} returned HTTP {response.status_code}", target
            )

        return response.content

    def upload(self, target: DeploymentTarget, artifact: PackageArtifact, name: str) -> str:
        """Upload a package archive to a target

        Args:
            target: Deployment target
            artifact: Package to upload
            name: Package name sent with the upload form

        Returns:
            Response body

        Raises:
            UploadFailure: On transport errors or an error status
        """
        url = self.service_url(target)
        logger.info(f"Uploading {artifact.file_name} to {target}")

        try:
            with open(artifact.path, 'rb') as fh:
                response = self.session.post(
                    url,
                    data={"name": name},
                    files={"file": (artifact.file_name, fh, "application/octet-stream")},
                    auth=self.auth,
                    timeout=self.timeout,
                )
        except OSError as e:
            raise UploadFailure(f"Upload of {artifact.path} to {target} failed: {e}", target)
        except requests.exceptions.RequestException as e:
            raise UploadFailure(f"Upload of {artifact.path} to {target} failed: {e}", target)

        body = response.text or ""
        logger.debug(f"Upload response (truncated): {excerpt(body)}")

        if response.status_code >= 400:
            raise UploadFailure(
                f"Upload to {target} returned HTTP {response.status_code}", target, body
            )

        match = STATUS_CODE_PATTERN.search(body)
        if match and match.group(1) != "200":
            raise UploadFailure(
                f"Upload to {target} reported status {match.group(1)}", target, body
            )

        return body

    def install(self, target: DeploymentTarget, package_path: str) -> str:
        """Install an uploaded package, recursively and forced

        Raises:
            InstallFailure: On transport errors or a response without success
        """
        url = self.install_endpoint(target, package_path)
        logger.info(f"Installing {package_path} on {target}")

        try:
            response = self.session.post(
                url,
                params=dict(INSTALL_PARAMS),
                auth=self.auth,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise InstallFailure(f"Install of {package_path} on {target} failed: {e}", target)

        body = response.text or ""

        if response.status_code >= 400:
            raise InstallFailure(
                f"Install of {package_path} on {target} returned HTTP {response.status_code}",
                target,
                body,
            )

        if not is_install_success(body, self.config.success_token):
            logger.error(f"Install response (truncated): {excerpt(body)}")
            raise InstallFailure(
                f"Installation of {package_path} failed or did not return success on {target}",
                target,
                body,
            )

        return body
