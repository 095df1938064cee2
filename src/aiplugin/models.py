"""Canonical Pydantic models shared across all aiplugin modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig`, :class:`OutputConfig`, and :class:`GlobalConfig`.

**Manifest models** -- the wire contract of ``/.well-known/ai-plugin.json``:
    :class:`Manifest`, :class:`ApiConfig`, and the :data:`AuthConfig`
    discriminated union (:class:`NoAuth`, :class:`ServiceHttpAuth`,
    :class:`UserHttpAuth`, :class:`OAuthAuth`).

**OpenAPI models** -- produced by the parser and consumed by the invocation
engine: :class:`HTTPMethod`, :class:`APIInfo`, :class:`ServerInfo`, and
:class:`OpenAPISpec`.

Manifest and OpenAPI models are frozen: they are created once and passed
around read-only.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

MANIFEST_PATH = "/.well-known/ai-plugin.json"
"""Well-known path where a site publishes its plugin manifest."""


# --- Config ---


class RequestConfig(BaseModel):
    """HTTP settings applied to every outbound request."""

    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/aiplugin/config.json``.

    Loaded and saved by :func:`~aiplugin.config.load_global_config` and
    :func:`~aiplugin.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by environment variables or CLI
    flags. See :func:`~aiplugin.config.resolve_config` for the full chain.
    """

    manifest_path: str = Field(
        default=MANIFEST_PATH, description="Path of the plugin manifest on a site"
    )
    service_name: Optional[str] = Field(
        default=None,
        description="Service name used to look up service_http verification tokens",
    )
    user_agent: Optional[str] = Field(
        default=None, description="User-Agent override for outbound requests"
    )
    request: RequestConfig = Field(default_factory=RequestConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Manifest ---


class AuthorizationType(str, enum.Enum):
    """HTTP authorization schemes a manifest may declare for http auth."""

    BEARER = "bearer"
    BASIC = "basic"


class _ManifestAuth(BaseModel):
    model_config = ConfigDict(frozen=True)

    instructions: Optional[str] = None


class NoAuth(_ManifestAuth):
    """No authentication."""

    type: Literal["none"] = "none"


class ServiceHttpAuth(_ManifestAuth):
    """App-level API keys, one per calling service.

    The manifest declares the key under ``verification_token``; the plural
    spelling is accepted too.
    """

    type: Literal["service_http"] = "service_http"
    authorization_type: AuthorizationType
    verification_tokens: dict[str, str] = Field(
        validation_alias=AliasChoices("verification_token", "verification_tokens"),
    )


class UserHttpAuth(_ManifestAuth):
    """User-level HTTP authentication; the token comes from the end user."""

    type: Literal["user_http"] = "user_http"
    authorization_type: AuthorizationType


class OAuthAuth(_ManifestAuth):
    """Three-legged OAuth authentication."""

    type: Literal["oauth"] = "oauth"
    client_url: str = Field(
        description="URL the user is sent to for the OAuth flow to begin"
    )
    scope: str = Field(description="OAuth scopes needed on the user's behalf")
    authorization_url: str = Field(
        description="Endpoint used to exchange the OAuth code for an access token"
    )
    authorization_content_type: str = Field(
        description="Content-Type expected by the authorization_url endpoint"
    )
    verification_tokens: dict[str, str] = Field(default_factory=dict)


AuthConfig = Annotated[
    Union[NoAuth, ServiceHttpAuth, UserHttpAuth, OAuthAuth],
    Field(discriminator="type"),
]
"""Manifest ``auth`` section, discriminated by its ``type`` field."""


class ApiConfig(BaseModel):
    """Location of the plugin's OpenAPI document.

    ``is_user_authenticated`` is also accepted under the older wire name
    ``has_user_authentication``.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["openapi"]
    url: str
    is_user_authenticated: bool = Field(
        validation_alias=AliasChoices(
            "is_user_authenticated", "has_user_authentication"
        ),
    )


class Manifest(BaseModel):
    """A manifest object describing an AI plugin.

    Example::

        manifest = Manifest.model_validate(response.json())
        manifest.auth.type  # "none", "service_http", "user_http" or "oauth"
    """

    model_config = ConfigDict(frozen=True)

    schema_version: str
    name_for_model: str
    name_for_human: str
    description_for_model: str
    description_for_human: str
    auth: AuthConfig
    api: ApiConfig
    logo_url: str
    contact_email: str
    legal_info_url: str

    @property
    def contact_domain(self) -> str:
        """Domain part of :attr:`contact_email`."""
        return self.contact_email.rpartition("@")[2]


def parse_manifest(raw: Any) -> Manifest:
    """Validate a decoded manifest payload against the known manifest shape.

    Raises:
        pydantic.ValidationError: If the payload does not match.
    """
    return Manifest.model_validate(raw)


# --- OpenAPI ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods a plugin endpoint can be invoked with."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class APIInfo(BaseModel):
    """API metadata extracted from the document's *Info Object*."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    version: str = ""
    description: Optional[str] = None


class ServerInfo(BaseModel):
    """A server entry from an OpenAPI 3.x ``servers`` array."""

    model_config = ConfigDict(frozen=True)

    url: str
    description: Optional[str] = None


class OpenAPISpec(BaseModel):
    """Normalised, dereferenced OpenAPI (or Swagger 2.0) document.

    ``version`` holds the literal ``swagger``/``openapi`` value so the
    invocation engine can branch on it; it is empty when the document
    declares neither. Method keys in ``paths`` are lower-cased.

    Base URL material is version specific: ``host``, ``base_path`` and
    ``schemes`` for Swagger 2.0, ``servers`` for OpenAPI 3.x.
    """

    model_config = ConfigDict(frozen=True)

    version: str = ""
    info: APIInfo = Field(default_factory=APIInfo)
    paths: dict[str, dict[str, Any]] = Field(default_factory=dict)
    host: Optional[str] = None
    base_path: Optional[str] = None
    schemes: list[str] = Field(default_factory=list)
    servers: list[ServerInfo] = Field(default_factory=list)
    source_url: Optional[str] = Field(
        default=None, description="URL the document was fetched from"
    )
    raw: Optional[dict[str, Any]] = Field(
        default=None, description="Dereferenced document for reference"
    )
