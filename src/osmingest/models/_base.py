"""Base model for osmingest records and entities.

Every model is frozen and ignores unknown keys.  ``TagTable`` is the
canonical tag representation shared by both wire formats.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from osmingest.ingestion.normalize import coerce_tags, reject_bool

OsmId = Annotated[int, BeforeValidator(reject_bool), Field(ge=-(2**63), le=2**63 - 1)]
"""64-bit signed identifier.  Numeric strings (XML attributes) are accepted."""

TagTable = Annotated[dict[str, str], BeforeValidator(coerce_tags)]
"""Free-form ``key -> value`` metadata.  Absent tags are ``{}``, never ``None``."""


class OsmBaseModel(BaseModel):
    """Base for all osmingest models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )
