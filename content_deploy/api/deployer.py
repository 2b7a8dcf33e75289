"""Deployer API for content package deployment"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import requests

from ..constants import (
    WORKSPACE_PACKAGE_GLOB,
    MSG_INSTALL_SUCCESS,
    MSG_WOULD_INSTALL,
    MSG_DEPLOY_COMPLETE,
)
from ..core import ConfigResolver, PackageLocator, FilterValidator, PackageDiscovery
from ..models import (
    DeployConfig,
    DeploymentRequest,
    DeploymentTarget,
    DeployResult,
    TargetResult,
    OperationStatus,
    ErrorDetail,
    PackageArtifact,
    RemotePackageLocation,
)
from ..services import ConfigService, PackageManagerClient
from ..utils import exploded_workspace
from .exceptions import (
    ContentDeployError,
    ConfigError,
    NotFoundError,
    FilterMismatchError,
    RemoteDiscoveryAmbiguous,
    TargetError,
)

logger = logging.getLogger(__name__)


class Deployer:
    """Deploys content packages to repository servers

    Targets are processed one at a time in resolved order. The first
    upload or install failure stops the run; targets that already
    succeeded are not rolled back.
    """

    def __init__(self,
                 config: DeployConfig,
                 client: Optional[PackageManagerClient] = None,
                 session: Optional[requests.Session] = None):
        """
        Initialize deployer

        Args:
            config: Deployment configuration
            client: Package manager client (built from config if omitted)
            session: HTTP session for the default client
        """
        self.config = config
        self.resolver = ConfigResolver(config)
        self.locator = PackageLocator(config.max_package_size)
        self.validator = FilterValidator(config.reference_root)
        self.client = client or PackageManagerClient(config, session=session)
        self.discovery = PackageDiscovery(self.client, config.package_base_path)

    def deploy(self, request: DeploymentRequest) -> DeployResult:
        """
        Run one deployment request

        Args:
            request: Deployment request

        Returns:
            DeployResult: SUCCESS, FAILED, or PARTIAL when some targets
            were installed before a failure
        """
        result = DeployResult(
            status=OperationStatus.IN_PROGRESS,
            package_name=request.package_name,
            environment=request.environment,
            instance=request.instance,
            pool=request.pool,
            debug=request.debug,
        )

        logger.info(
            f"Processing package: {request.package_name} from {request.package_path}"
        )

        try:
            self._run(request, result)

        except ContentDeployError as e:
            result.add_error(
                e.error_code,
                str(e),
                kind=type(e).__name__,
                **self._error_context(e)
            )
            result.message = str(e)
            status = OperationStatus.PARTIAL if result.completed_targets else OperationStatus.FAILED
            result.complete(status)

            if isinstance(e, FilterMismatchError):
                logger.error(f"Filter mismatch, operator review required: {e}")
            else:
                logger.error(str(e))

            if status == OperationStatus.PARTIAL:
                done = ', '.join(str(r.target) for r in result.completed_targets)
                logger.error(f"Partial deployment, manual reconciliation required. Completed: {done}")

        return result

    def _run(self, request: DeploymentRequest, result: DeployResult) -> None:
        targets, build_allowed = self.resolver.resolve(
            request.environment,
            request.pool,
            request.instance
        )
        if not build_allowed:
            raise ConfigError(
                f"Builds are not allowed for environment '{request.environment}'"
            )
        result.targets = list(targets)

        with exploded_workspace(self.config.explode_root, request.group, request.project) as workspace:
            artifact = self.locator.locate(request.package_path, request.package_name, workspace)
            result.artifact = artifact

            if request.debug:
                message = "Debug mode: filter validation skipped, install calls will not be issued"
                logger.warning(message)
                result.add_warning(message)
            else:
                self._check_filters(artifact, request)

            for target in targets:
                self._deploy_to_target(target, artifact, request, result)

        result.message = MSG_DEPLOY_COMPLETE
        result.complete(OperationStatus.SUCCESS)
        logger.info(MSG_DEPLOY_COMPLETE)

    def _check_filters(self, artifact: PackageArtifact, request: DeploymentRequest) -> None:
        """Run the filter gate

        Raises:
            FilterMismatchError: If the package's filters are not approved
        """
        validation = self.validator.validate_package(artifact, request.group, request.project)

        for line in validation.info:
            logger.debug(line)

        if not validation.is_valid:
            raise FilterMismatchError(
                f"Filter validation failed for {artifact.path} "
                f"(group={request.group}, project={request.project}): "
                + "; ".join(validation.errors),
                unmatched=validation.unmatched
            )

        logger.info(f"Filter validation passed for {artifact.file_name}")

    def _deploy_to_target(self,
                          target: DeploymentTarget,
                          artifact: PackageArtifact,
                          request: DeploymentRequest,
                          result: DeployResult) -> None:
        """Upload, discover and install on one target"""
        target_result = TargetResult(target=target)
        result.target_results.append(target_result)

        try:
            self.client.upload(target, artifact, request.package_name)
            target_result.uploaded = True

            location = self._discover(target, artifact.logical_name, request.group, result)
            target_result.location = location
            target_result.install_url = self.client.install_url(target, location.package_path)

            if request.debug:
                logger.info(MSG_WOULD_INSTALL.format(
                    package=location.package_path,
                    target=target,
                    url=target_result.install_url
                ))
                target_result.message = "install skipped (debug)"
                target_result.status = OperationStatus.SKIPPED
                return

            self.client.install(target, location.package_path)
            target_result.installed = True
            target_result.message = MSG_INSTALL_SUCCESS.format(
                package=location.package_path,
                target=target
            )
            target_result.status = OperationStatus.SUCCESS
            logger.info(target_result.message)

        except TargetError as e:
            target_result.status = OperationStatus.FAILED
            target_result.message = str(e)
            target_result.error = ErrorDetail(
                code=e.error_code,
                message=str(e),
                kind=type(e).__name__,
                context={"target": str(target)}
            )
            raise

    def _discover(self,
                  target: DeploymentTarget,
                  name: str,
                  requested_group: str,
                  result: DeployResult) -> RemotePackageLocation:
        """Discover the install location, falling back to the requested group"""
        try:
            location = self.discovery.discover(target, name, requested_group)
            reason = f"Package '{name}' not found in listing of {target}"
        except RemoteDiscoveryAmbiguous as e:
            location = None
            reason = str(e)

        if location is None:
            location = self.discovery.fallback_location(name, requested_group)
            message = f"{reason}; using fallback path {location.package_path}"
            logger.warning(message)
            result.add_warning(message)

        return location

    @staticmethod
    def _error_context(error: ContentDeployError) -> dict:
        context = {}
        for attr in ("path", "target", "unmatched"):
            value = getattr(error, attr, None)
            if value:
                context[attr] = value if isinstance(value, list) else str(value)
        return context

    def deploy_workspace(self,
                         workspace: Union[str, Path],
                         group: str,
                         project: str,
                         environment: str,
                         instance: str,
                         pool: str,
                         debug: bool = False) -> List[DeployResult]:
        """
        Deploy every zip package in a workspace directory

        Packages are processed in name order, each with its file stem as
        the package name. The first failed package stops the batch.

        Returns:
            Results of the packages processed, the last one failed if the
            batch stopped early

        Raises:
            NotFoundError: If the workspace is missing or has no zip files
        """
        workspace = Path(workspace)
        if not workspace.is_dir():
            raise NotFoundError(f"Workspace directory not found: {workspace}", str(workspace))

        files = sorted(p for p in workspace.glob(WORKSPACE_PACKAGE_GLOB) if p.is_file())
        if not files:
            raise NotFoundError(f"No .zip files found in workspace: {workspace}", str(workspace))

        results = []
        for package_file in files:
            logger.info(f"Processing package file: {package_file} (package prefix: {package_file.stem})")

            request = DeploymentRequest(
                package_path=package_file,
                package_name=package_file.stem,
                group=group,
                project=project,
                environment=environment,
                instance=instance,
                pool=pool,
                debug=debug
            )
            result = self.deploy(request)
            results.append(result)

            if not result.is_success:
                logger.error(f"Stopping workspace deployment at {package_file.name}")
                break

            logger.info(f"Finished processing {package_file.stem}")

        return results


def deploy(package_path: Union[str, Path],
           package_name: str,
           group: str,
           project: str,
           environment: str,
           instance: str,
           pool: str,
           debug: bool = False,
           config_path: Optional[Union[str, Path]] = None) -> DeployResult:
    """
    Deploy a content package

    This is a convenience function that loads the configuration, creates
    a Deployer instance and performs the deployment.

    Args:
        package_path: Package file or directory containing packages
        package_name: Package file name prefix
        group: Package group
        project: Project name
        environment: Target environment
        instance: author, publish or both
        pool: Server pool
        debug: Skip filter validation and install calls
        config_path: Configuration file (SERVER_CONFIG or default otherwise)

    Returns:
        DeployResult: Deployment result

    Raises:
        ConfigError: If the configuration cannot be loaded
    """
    config = ConfigService(config_path).load_config()

    request = DeploymentRequest(
        package_path=package_path,
        package_name=package_name,
        group=group,
        project=project,
        environment=environment,
        instance=instance,
        pool=pool,
        debug=debug
    )

    return Deployer(config).deploy(request)
