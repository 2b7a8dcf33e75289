# content_deploy/core/config_resolver.py
"""Resolve environment, pool and instance role to deployment targets"""

import logging
from typing import List, Optional, Tuple, Union

from ..api.exceptions import ConfigError
from ..constants import BUILD_ALLOWED_KEY, TRUTHY_LITERALS, FALSY_LITERALS
from ..models.config import DeployConfig
from ..models.target import DeploymentTarget, InstanceRole

logger = logging.getLogger(__name__)


def parse_build_flag(value: str, key: str) -> bool:
    """Parse a build-permission value

    The value may be a comma separated list of literals. Every token must be
    one of true/false/1/0/yes/no (any case); the build is allowed when at
    least one token is truthy.

    Raises:
        ConfigError: If a token is not a recognized literal
    """
    tokens = [token.strip().lower() for token in value.split(',') if token.strip()]
    if not tokens:
        raise ConfigError(f"Config key '{key}' is empty")

    allowed = False
    for token in tokens:
        if token in TRUTHY_LITERALS:
            allowed = True
        elif token not in FALSY_LITERALS:
            raise ConfigError(
                f"Invalid build permission '{value}' in config key '{key}' "
                f"(expected one of true/false/1/0/yes/no)"
            )
    return allowed


class ConfigResolver:
    """Resolves deployment targets and build permission from configuration"""

    def __init__(self, config: DeployConfig):
        """
        Initialize resolver

        Args:
            config: Loaded deployment configuration
        """
        self.config = config

    def env_token(self, environment: str) -> str:
        """Token used for an environment in server-list keys"""
        environment = environment.lower()
        return self.config.env_tokens.get(environment, environment)

    def default_port(self, role: InstanceRole) -> int:
        """Default port for a role"""
        if role == InstanceRole.AUTHOR:
            return self.config.default_author_port
        return self.config.default_publish_port

    def build_allowed(self, environment: str) -> bool:
        """Check whether builds may be deployed to an environment

        Raises:
            ConfigError: If the flag is missing or not a recognized literal
        """
        key = BUILD_ALLOWED_KEY.format(environment=environment.lower())
        value = self.config.build_allowed.get(environment.lower())

        if value is None:
            raise ConfigError(
                f"Could not find build permission for environment '{environment}' "
                f"in {self.config.source or 'configuration'} (expected '{key}')"
            )

        logger.debug(f"Build policy for {environment}: {value}")
        return parse_build_flag(value, key)

    def servers_for(self,
                    env_token: str,
                    pool: str,
                    role: InstanceRole) -> Optional[List[DeploymentTarget]]:
        """Look up the server list for one (environment token, pool, role)

        Args:
            env_token: Environment token
            pool: Pool name
            role: AUTHOR or PUBLISH

        Returns:
            Targets in configured order with default ports applied,
            or None if no such list is configured
        """
        entries = self.config.server_table.get((env_token.lower(), pool.lower(), role.value))
        if entries is None:
            return None

        port = self.default_port(role)
        return [
            DeploymentTarget(host=entry.host, port=entry.port or port, role=role)
            for entry in entries
        ]

    def source_keys(self,
                    environment: str,
                    pool: str,
                    role: InstanceRole) -> List[str]:
        """Configuration keys that supplied the server lists for a resolution"""
        token = self.env_token(environment)
        roles = [InstanceRole.AUTHOR, InstanceRole.PUBLISH] if role == InstanceRole.BOTH else [role]
        keys = []
        for slot_role in roles:
            keys.extend(self.config.server_sources.get((token, pool.lower(), slot_role.value), ()))
        return keys

    def resolve(self,
                environment: str,
                pool: str,
                role: Union[str, InstanceRole]) -> Tuple[List[DeploymentTarget], bool]:
        """
        Resolve targets and build permission

        For role `both` the author list comes first, then the publish list.
        Duplicate hosts are kept, so a host listed twice receives the
        package twice.

        Args:
            environment: Environment name
            pool: Pool name
            role: author, publish or both

        Returns:
            (targets, build_allowed)

        Raises:
            ConfigError: On unknown role, missing server lists or invalid
                build permission
        """
        if not isinstance(role, InstanceRole):
            try:
                role = InstanceRole.from_string(role)
            except ValueError:
                raise ConfigError(f"Unknown instance '{role}'. Use author|publish|both.")

        token = self.env_token(environment)
        pool = pool.lower()
        source = self.config.source or "configuration"

        if role == InstanceRole.BOTH:
            authors = self.servers_for(token, pool, InstanceRole.AUTHOR)
            publishers = self.servers_for(token, pool, InstanceRole.PUBLISH)
            if authors is None and publishers is None:
                raise ConfigError(
                    f"No server lists for environment='{environment}' pool='{pool}' "
                    f"(expected '{token}_{pool}_aem_authors' or "
                    f"'{token}_{pool}_aem_publishers') in {source}"
                )
            targets = (authors or []) + (publishers or [])
        else:
            targets = self.servers_for(token, pool, role)
            if targets is None:
                raise ConfigError(
                    f"No server list for environment='{environment}' pool='{pool}' "
                    f"instance='{role.value}' (expected '{token}_{pool}_aem_{role.value}...') "
                    f"in {source}"
                )

        if not targets:
            raise ConfigError(
                f"No servers found for environment='{environment}' pool='{pool}' "
                f"instance='{role.value}' in {source}"
            )

        logger.info(f"Resolved servers: {', '.join(str(t) for t in targets)}")

        return targets, self.build_allowed(environment)
