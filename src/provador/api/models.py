"""Pydantic request and response models for the try-on API.

These models define the JSON schema for every API endpoint.  FastAPI uses
them for automatic request validation, serialisation, and OpenAPI
documentation generation.

Field names on the wire are camelCase.  The try-on request also accepts the
names used by older clients (``avatarImageUrl``, ``tryOnResultId``).

Models
------
TryOnRequest
    Payload for ``POST /api/try-on``.
TryOnSuccessResponse / TryOnErrorResponse
    The two response envelopes of ``POST /api/try-on``.
CreateResultRequest / CreateResultResponse
    Payload and response for ``POST /api/try-on/results``.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from provador.core.tryon import TryOnJob


class TryOnRequest(BaseModel):
    """Request body for the ``POST /api/try-on`` endpoint.

    Attributes:
        subject_image_url: URL of the person photo.  Required, but checked by
            the service so a missing value yields the localized 400 envelope.
        garment_image_url: URL of the garment photo.  Same rules.
        category: Garment category hint.  Defaults server-side.
        result_id: Id of a pending result record.  Absent in demo mode.
        demo_mode: Skip every result store write.
        retry_count: Number of earlier attempts for this result; selects the
            starting escalation tier.
    """

    model_config = ConfigDict(populate_by_name=True)

    subject_image_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("subjectImageUrl", "avatarImageUrl", "subject_image_url"),
        description="URL of the person photo.",
    )
    garment_image_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("garmentImageUrl", "garment_image_url"),
        description="URL of the garment photo.",
    )
    category: str | None = Field(
        default=None,
        description="Garment category hint (e.g. 'upper_body').",
    )
    result_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("resultId", "tryOnResultId", "result_id"),
        description="Pending result record id; omit for demo mode.",
    )
    demo_mode: bool = Field(
        default=False,
        validation_alias=AliasChoices("demoMode", "demo_mode"),
        description="Skip all result persistence.",
    )
    retry_count: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("retryCount", "retry_count"),
        description="Caller-maintained retry counter (0 = first attempt).",
    )

    def to_job(self) -> TryOnJob:
        return TryOnJob(
            subject_image_url=self.subject_image_url,
            garment_image_url=self.garment_image_url,
            category=self.category,
            result_id=self.result_id,
            demo_mode=self.demo_mode,
            retry_count=self.retry_count,
        )


class TryOnSuccessResponse(BaseModel):
    """Successful try-on envelope (HTTP 200)."""

    success: bool = True
    resultImageUrl: str
    processingTimeMs: int
    model: str
    retryCount: int


class TryOnErrorResponse(BaseModel):
    """Failed try-on envelope (HTTP 400, 429 or 500)."""

    success: bool = False
    error: str


class CreateResultRequest(BaseModel):
    """Request body for ``POST /api/try-on/results``.

    All fields are optional metadata copied onto the pending record.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str | None = Field(default=None, validation_alias=AliasChoices("userId", "user_id"))
    avatar_id: str | None = Field(
        default=None, validation_alias=AliasChoices("avatarId", "avatar_id")
    )
    garment_source: str | None = Field(
        default=None, validation_alias=AliasChoices("garmentSource", "garment_source")
    )
    garment_id: str | None = Field(
        default=None, validation_alias=AliasChoices("garmentId", "garment_id")
    )
    garment_image_url: str | None = Field(
        default=None, validation_alias=AliasChoices("garmentImageUrl", "garment_image_url")
    )

    def to_fields(self) -> dict:
        return self.model_dump(exclude_none=True)


class CreateResultResponse(BaseModel):
    """Response of ``POST /api/try-on/results``."""

    resultId: str
    status: str
