"""Wing domain models."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from wingnest.domain.connections import ConnectionType


class Wing(BaseModel):
    """A saved web page.

    Only the fields below are read by connection analysis. Anything else the
    extension stores on a wing (timestamps, nest ids, favicon) is kept as
    extra data and passed through untouched.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str
    url: str = ""
    title: str = ""
    summary: str | None = None  # generated out-of-band, may be missing
    collection_ids: list[str] = Field(default_factory=list)


class RelatedWing(Wing):
    """A wing as seen from another wing it is connected to."""

    connection_score: float
    connection_type: ConnectionType
    connection_id: str
