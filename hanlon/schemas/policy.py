"""
Policy Schemas.

Pydantic schemas for the policy request payloads sent to the engine.
"""

from pydantic import BaseModel, ConfigDict, Field


class PolicyCreate(BaseModel):
    """Schema for creating a new policy."""

    template: str = Field(..., min_length=1, description="Policy template name")
    label: str = Field(..., min_length=1, description="Policy label")
    model_uuid: str = Field(..., min_length=1, description="Model attached to the policy")
    tags: list[str] | None = Field(default=None, description="Tags a node must carry to match")
    broker_uuid: str = Field(default="none", description="Broker attached to the policy")
    line_number: int | None = Field(
        default=None,
        ge=0,
        description="Position in the policy rules table; the engine appends when omitted",
    )
    enabled: bool = Field(default=False, description="Whether the policy is enabled")
    maximum: int = Field(default=0, ge=0, description="Maximum number of bound nodes (0 = unlimited)")
    is_default: bool = Field(default=False, description="Whether this is the system default policy")

    model_config = ConfigDict(extra="forbid")


class PolicyUpdate(BaseModel):
    """
    Schema for updating an existing policy.

    Only explicitly set fields are sent (model_dump(exclude_unset=True)),
    so the engine never overwrites a field the operator did not touch.
    """

    label: str | None = Field(default=None, min_length=1)
    model_uuid: str | None = Field(default=None, min_length=1)
    tags: list[str] | None = None
    broker_uuid: str | None = None
    enabled: bool | None = None
    maximum: int | None = Field(default=None, ge=0)
    new_line_number: int | None = Field(
        default=None,
        ge=0,
        description="New position in the policy rules table; the engine renumbers",
    )

    model_config = ConfigDict(extra="forbid")
