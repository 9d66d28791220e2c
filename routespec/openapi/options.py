"""Document options: the info block and merge sources of the API document."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from routespec.core.config import Settings


class ContactInfo(BaseModel):
    """Contact block of the document info."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    url: str | None = None
    email: str | None = None


class LicenseInfo(BaseModel):
    """License block of the document info."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str | None = None


class ServerInfo(BaseModel):
    """Entry of the document servers list."""

    model_config = ConfigDict(frozen=True)

    url: str
    description: str | None = None


class OpenApiOptions(BaseModel):
    """Options controlling the generated API document.

    Attributes:
        title: Document title.
        version: API version (not the OpenAPI version).
        description: Document description.
        terms_of_service: Terms of service URL.
        contact: Contact information.
        license: License information.
        servers: Server list.
        openapi: OpenAPI version of the output ("3.0.0" or "3.1.0").
        additional_json_urls: Secondary documents merged into the primary one.
    """

    model_config = ConfigDict(frozen=True)

    title: str = "API"
    version: str = "0.1.0"
    description: str | None = None
    terms_of_service: str | None = None
    contact: ContactInfo | None = None
    license: LicenseInfo | None = None
    servers: tuple[ServerInfo, ...] = ()
    openapi: Literal["3.0.0", "3.1.0"] = "3.1.0"
    additional_json_urls: tuple[str, ...] = Field(default_factory=tuple)

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenApiOptions":
        """Build options from application settings.

        Args:
            settings: Application settings.

        Returns:
            OpenApiOptions: Options with title, version, description,
                OpenAPI version and secondary URLs taken from settings.
        """
        return cls(
            title=settings.app_name,
            version=settings.app_version,
            description=settings.app_description,
            openapi=settings.openapi_version,
            additional_json_urls=tuple(settings.additional_json_url_list),
        )

    def info_block(self) -> dict[str, object]:
        """Render the document ``info`` object."""
        info: dict[str, object] = {"title": self.title, "version": self.version}
        if self.description:
            info["description"] = self.description
        if self.terms_of_service:
            info["termsOfService"] = self.terms_of_service
        if self.contact is not None:
            info["contact"] = self.contact.model_dump(exclude_none=True)
        if self.license is not None:
            info["license"] = self.license.model_dump(exclude_none=True)
        return info
