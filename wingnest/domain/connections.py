"""Connection domain models."""

import json
from enum import Enum
from hashlib import md5

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class ConnectionType(str, Enum):
    """How a connection came to exist."""

    SEMANTIC = "semantic"  # scored with the LLM signal available
    TAXONOMY = "taxonomy"  # shared collection/domain signals only
    MANUAL = "manual"  # asserted by the user


def connection_id(wing_id1: str, wing_id2: str) -> str:
    """Generate the connection ID for an unordered pair of wings."""
    first, second = sorted((wing_id1, wing_id2))
    return md5(json.dumps([first, second]).encode()).hexdigest()


class Connection(BaseModel):
    """An undirected, scored relation between two distinct wings."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    wing_id1: str
    wing_id2: str
    score: float = Field(ge=0.0, le=1.0)
    type: ConnectionType

    @model_validator(mode="after")
    def _check_distinct_wings(self) -> "Connection":
        if self.wing_id1 == self.wing_id2:
            raise ValueError(f"Connection cannot link wing {self.wing_id1} to itself")
        return self

    @classmethod
    def between(
        cls, wing_id1: str, wing_id2: str, *, score: float, type: ConnectionType
    ) -> "Connection":
        """Create a connection keyed on its pair of wings."""
        return cls(
            id=connection_id(wing_id1, wing_id2),
            wing_id1=wing_id1,
            wing_id2=wing_id2,
            score=score,
            type=type,
        )

    def links(self, wing_id1: str, wing_id2: str) -> bool:
        """Whether this connection joins the two wings, in either order."""
        return {self.wing_id1, self.wing_id2} == {wing_id1, wing_id2}

    def touches(self, wing_id: str) -> bool:
        return wing_id in (self.wing_id1, self.wing_id2)

    def other_wing_id(self, wing_id: str) -> str:
        """Return the endpoint that is not `wing_id`."""
        return self.wing_id2 if self.wing_id1 == wing_id else self.wing_id1


class ConnectionStats(BaseModel):
    """Aggregate statistics over all stored connections."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_connections: int = 0
    total_wings: int = 0
    average_score: float = 0.0
    high_score_connections: int = 0
    connections_by_type: dict[str, int] = {}
