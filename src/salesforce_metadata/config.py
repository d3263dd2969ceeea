"""Configuration management for the Salesforce metadata layer.

Loads settings from environment variables or .env file.
Credentials come from env vars or a connection URL, never hardcoded.

A connection needs an existing session id (OAuth access token) and the
instance URL it was issued for. Connection URL format (one key=value
pair per ';'):
    salesforce://sessionId=00D...;instanceUrl=https://acme.my.salesforce.com
"""

import re
from dataclasses import dataclass

from pydantic_settings import BaseSettings

ACCEPTABLE_URL = "salesforce"
DEFAULT_API_VERSION = "39.0"

_URL_RE = re.compile(rf"\A{ACCEPTABLE_URL}://(.*)\Z", re.DOTALL)


@dataclass
class ConnectionConfig:
    """Connection config for one Salesforce org."""

    session_id: str = ""
    instance_url: str = ""
    api_version: str = DEFAULT_API_VERSION
    verify_ssl: bool = True
    timeout: int = 60

    @property
    def base_url(self) -> str:
        """Instance URL without a trailing slash."""
        return self.instance_url.rstrip("/")

    @property
    def rest_base_path(self) -> str:
        """Versioned REST API root, e.g. /services/data/v39.0."""
        return f"/services/data/v{self.api_version}"


def accepts_url(url: str | None) -> bool:
    """Return True if *url* is a salesforce:// connection URL."""
    return url is not None and _URL_RE.match(url) is not None


def parse_connection_properties(url: str) -> dict[str, str]:
    """Split the properties part of a connection URL into a dict.

    Pairs are separated by ';'. Keys and values are stripped; pairs
    without '=' are ignored. Later keys overwrite earlier ones.
    """
    match = _URL_RE.match(url)
    if not match:
        return {}
    props: dict[str, str] = {}
    for pair in match.group(1).split(";"):
        if "=" not in pair:
            continue
        key, value = pair.split("=", 1)
        key = key.strip()
        if key:
            props[key] = value.strip()
    return props


def _check_required(config: ConnectionConfig, session_key: str, instance_key: str) -> None:
    """Raise ValueError naming whichever required value is missing."""
    missing = []
    if not config.session_id:
        missing.append(session_key)
    if not config.instance_url:
        missing.append(instance_key)
    if missing:
        raise ValueError(
            f"Missing Salesforce connection value(s): {', '.join(missing)}. "
            "A session id and the instance URL it belongs to are both required."
        )


def parse_connection_url(url: str, overrides: dict[str, str] | None = None) -> ConnectionConfig:
    """Build a ConnectionConfig from a connection URL.

    Args:
        url: ``salesforce://key=value;key=value`` string. Recognised keys
            are sessionId, instanceUrl and apiVersion.
        overrides: Extra properties (e.g. a session id passed separately).
            URL properties win over overrides, matching how driver
            managers merge URL and info properties.

    Raises:
        ValueError: If the URL does not use the salesforce scheme, or
            sessionId or instanceUrl is missing.
    """
    if not accepts_url(url):
        raise ValueError(f'Unknown URL format "{url}"')
    props = dict(overrides or {})
    props.update(parse_connection_properties(url))
    config = ConnectionConfig(
        session_id=props.get("sessionId", ""),
        instance_url=props.get("instanceUrl", ""),
        api_version=props.get("apiVersion", DEFAULT_API_VERSION),
    )
    _check_required(config, "sessionId", "instanceUrl")
    return config


class Settings(BaseSettings):
    """Salesforce metadata settings.

    Values are loaded from environment variables.
    For local development, use a .env file.
    """

    # Salesforce org
    sf_instance_url: str = ""
    sf_api_version: str = DEFAULT_API_VERSION
    sf_session_id: str = ""

    # HTTP
    sf_verify_ssl: bool = True
    sf_timeout: int = 60

    # Optional connection URL; overrides the individual sf_* values when set
    sf_url: str = ""

    # Logging
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    def connection_config(self) -> ConnectionConfig:
        """Return the ConnectionConfig described by these settings.

        Raises:
            ValueError: If the URL is invalid, or no session id or
                instance URL is configured.
        """
        if self.sf_url:
            config = parse_connection_url(self.sf_url)
        else:
            config = ConnectionConfig(
                session_id=self.sf_session_id,
                instance_url=self.sf_instance_url,
                api_version=self.sf_api_version,
            )
            _check_required(config, "SF_SESSION_ID", "SF_INSTANCE_URL")
        config.verify_ssl = self.sf_verify_ssl
        config.timeout = self.sf_timeout
        return config


# Singleton settings instance
settings = Settings()
