"""Pydantic models for Figma REST API responses.

Only the fields the scanners rely on are declared. Everything else the API
returns is kept as extra data on the model, so nothing is lost when Figma
adds fields. Figma mixes camelCase (file payloads) and snake_case (library
and team payloads), so fields use aliases where the wire name differs.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class FigmaModel(BaseModel):
    """Base model for all Figma payloads."""

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


# =============================================================================
# Documents and nodes
# =============================================================================


class FigmaPropertyDefinition(FigmaModel):
    """Definition of a component property (variant, boolean, text, ...)."""

    type: str
    default_value: Any = Field(default=None, alias="defaultValue")
    variant_options: list[str] | None = Field(default=None, alias="variantOptions")
    description: str | None = None
    preferred_values: list[dict[str, Any]] = Field(
        default_factory=list, alias="preferredValues"
    )


class FigmaNode(FigmaModel):
    """A node in the document tree."""

    id: str
    name: str = ""
    type: str = ""
    children: list[FigmaNode] = Field(default_factory=list)
    component_id: str | None = Field(default=None, alias="componentId")
    component_property_definitions: dict[str, FigmaPropertyDefinition] = Field(
        default_factory=dict, alias="componentPropertyDefinitions"
    )
    bound_variables: dict[str, Any] = Field(
        default_factory=dict, alias="boundVariables"
    )


class FigmaComponentMeta(FigmaModel):
    """Component metadata embedded in file and node payloads."""

    key: str
    name: str
    description: str = ""
    documentation_links: list[Any] = Field(
        default_factory=list, alias="documentationLinks"
    )
    remote: bool = False
    component_set_id: str | None = Field(default=None, alias="componentSetId")


class FigmaStyleMeta(FigmaModel):
    """Style metadata embedded in file and node payloads."""

    key: str
    name: str
    style_type: str | None = Field(
        default=None, validation_alias=AliasChoices("styleType", "style_type")
    )
    description: str = ""
    remote: bool = False


class FigmaFile(FigmaModel):
    """Response of GET /files/{key}."""

    name: str = ""
    document: FigmaNode | None = None
    components: dict[str, FigmaComponentMeta] = Field(default_factory=dict)
    component_sets: dict[str, FigmaComponentMeta] = Field(
        default_factory=dict, alias="componentSets"
    )
    styles: dict[str, FigmaStyleMeta] = Field(default_factory=dict)
    last_modified: str | None = Field(default=None, alias="lastModified")
    thumbnail_url: str | None = Field(default=None, alias="thumbnailUrl")
    version: str | None = None
    role: str | None = None


class FigmaNodeEntry(FigmaModel):
    """One entry of a nodes response: the subtree plus referenced metadata."""

    document: FigmaNode
    components: dict[str, FigmaComponentMeta] = Field(default_factory=dict)
    styles: dict[str, FigmaStyleMeta] = Field(default_factory=dict)


class FigmaNodesResponse(FigmaModel):
    """Response of GET /files/{key}/nodes.

    Ids the API could not resolve map to None.
    """

    name: str = ""
    nodes: dict[str, FigmaNodeEntry | None] = Field(default_factory=dict)


# =============================================================================
# Published library content
# =============================================================================


class FigmaUser(FigmaModel):
    """A Figma user, also the response of GET /me."""

    id: str | None = None
    handle: str = ""
    email: str | None = None
    img_url: str | None = None


class FigmaPublishedComponent(FigmaModel):
    key: str
    name: str
    description: str = ""
    file_key: str | None = None
    node_id: str | None = None
    thumbnail_url: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    user: FigmaUser | None = None


class FigmaPublishedStyle(FigmaModel):
    key: str
    name: str
    style_type: str | None = None
    description: str = ""
    file_key: str | None = None
    node_id: str | None = None
    thumbnail_url: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class FigmaPublishedComponentSet(FigmaModel):
    key: str
    name: str
    description: str = ""
    file_key: str | None = None
    node_id: str | None = None
    thumbnail_url: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class FigmaCursor(FigmaModel):
    """Pagination cursor returned by team endpoints."""

    before: str | None = None
    after: str | None = None


class _ComponentsMeta(FigmaModel):
    components: list[FigmaPublishedComponent] = Field(default_factory=list)
    cursor: FigmaCursor | None = None


class _StylesMeta(FigmaModel):
    styles: list[FigmaPublishedStyle] = Field(default_factory=list)
    cursor: FigmaCursor | None = None


class _ComponentSetsMeta(FigmaModel):
    component_sets: list[FigmaPublishedComponentSet] = Field(default_factory=list)
    cursor: FigmaCursor | None = None


class FigmaFileComponentsResponse(FigmaModel):
    meta: _ComponentsMeta = Field(default_factory=_ComponentsMeta)


class FigmaFileStylesResponse(FigmaModel):
    meta: _StylesMeta = Field(default_factory=_StylesMeta)


class FigmaComponentSetsResponse(FigmaModel):
    meta: _ComponentSetsMeta = Field(default_factory=_ComponentSetsMeta)


class FigmaTeamComponentsResponse(FigmaModel):
    meta: _ComponentsMeta = Field(default_factory=_ComponentsMeta)


class FigmaTeamStylesResponse(FigmaModel):
    meta: _StylesMeta = Field(default_factory=_StylesMeta)


class FigmaTeamComponentSetsResponse(FigmaModel):
    meta: _ComponentSetsMeta = Field(default_factory=_ComponentSetsMeta)


class FigmaComponentResponse(FigmaModel):
    meta: FigmaPublishedComponent


class FigmaStyleResponse(FigmaModel):
    meta: FigmaPublishedStyle


class FigmaComponentSetResponse(FigmaModel):
    meta: FigmaPublishedComponentSet


# =============================================================================
# Variables
# =============================================================================


class FigmaVariableMode(FigmaModel):
    mode_id: str = Field(alias="modeId")
    name: str


class FigmaVariableCollection(FigmaModel):
    id: str
    name: str
    key: str | None = None
    modes: list[FigmaVariableMode] = Field(default_factory=list)
    default_mode_id: str | None = Field(default=None, alias="defaultModeId")
    remote: bool = False


class FigmaVariable(FigmaModel):
    """A design variable.

    Values per mode are raw API values: an RGBA dict for colors, a number,
    a string, a bool, or a {"type": "VARIABLE_ALIAS", "id": ...} reference.
    """

    id: str
    name: str
    key: str | None = None
    resolved_type: str | None = Field(default=None, alias="resolvedType")
    values_by_mode: dict[str, Any] = Field(default_factory=dict, alias="valuesByMode")
    variable_collection_id: str | None = Field(
        default=None, alias="variableCollectionId"
    )
    remote: bool = False


class _VariablesMeta(FigmaModel):
    variables: dict[str, FigmaVariable] = Field(default_factory=dict)
    variable_collections: dict[str, FigmaVariableCollection] = Field(
        default_factory=dict, alias="variableCollections"
    )


class FigmaVariablesResponse(FigmaModel):
    """Response of the local and published variables endpoints."""

    meta: _VariablesMeta = Field(default_factory=_VariablesMeta)


# =============================================================================
# File metadata, comments, images, versions, dev resources
# =============================================================================


class FigmaBranch(FigmaModel):
    key: str
    name: str = ""


class FigmaFileMetaResponse(FigmaModel):
    """Response of GET /files/{key}/meta (lightweight file metadata)."""

    name: str = ""
    role: str | None = None
    created_at: str | None = Field(
        default=None, validation_alias=AliasChoices("createdAt", "created_at")
    )
    last_modified: str | None = Field(
        default=None,
        validation_alias=AliasChoices("lastModified", "last_touched_at"),
    )
    thumbnail_url: str | None = Field(
        default=None, validation_alias=AliasChoices("thumbnailUrl", "thumbnail_url")
    )
    branches: list[FigmaBranch] = Field(default_factory=list)


class FigmaComment(FigmaModel):
    id: str
    message: str = ""
    user: FigmaUser | None = None
    created_at: str | None = None
    resolved_at: str | None = None


class FigmaCommentsResponse(FigmaModel):
    comments: list[FigmaComment] = Field(default_factory=list)


class FigmaImageResponse(FigmaModel):
    """Response of GET /images/{key}: node id to rendered image URL."""

    images: dict[str, str | None] = Field(default_factory=dict)
    err: str | None = None


class FigmaImageFillsResponse(FigmaModel):
    """Response of GET /files/{key}/images: image ref to download URL.

    Figma nests the map under meta.images; both shapes are accepted.
    """

    images: dict[str, str] = Field(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        extra = self.model_extra or {}
        meta = extra.get("meta")
        if not self.images and isinstance(meta, dict):
            images = meta.get("images")
            if isinstance(images, dict):
                self.images = {str(k): str(v) for k, v in images.items()}


class FigmaVersion(FigmaModel):
    id: str
    created_at: str | None = None
    label: str | None = None
    description: str | None = None
    user: FigmaUser | None = None


class FigmaFileVersionsResponse(FigmaModel):
    versions: list[FigmaVersion] = Field(default_factory=list)


class FigmaDevResource(FigmaModel):
    id: str
    name: str = ""
    url: str
    node_id: str | None = None
    file_key: str | None = None


class FigmaDevResourcesResponse(FigmaModel):
    dev_resources: list[FigmaDevResource] = Field(default_factory=list)


# =============================================================================
# Projects
# =============================================================================


class FigmaProject(FigmaModel):
    id: str
    name: str = ""


class FigmaTeamProjectsResponse(FigmaModel):
    name: str | None = None
    projects: list[FigmaProject] = Field(default_factory=list)


class FigmaProjectFile(FigmaModel):
    key: str
    name: str = ""
    thumbnail_url: str | None = None
    last_modified: str | None = None


class FigmaProjectFilesResponse(FigmaModel):
    name: str | None = None
    files: list[FigmaProjectFile] = Field(default_factory=list)
