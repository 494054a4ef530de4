"""Configuration models for kubeship workflows.

``DeployAllConfig`` is the typed argument bundle for the composed ``all``
action.  Constructing one guarantees the four names are present, so the
workflow runner never re-checks them.

Example::

    config = DeployAllConfig(
        cluster="todo-cluster",
        instance="todolist-couchdb",
        image="todolist",
        namespace="todolist_space",
        rollback=True,
    )
"""

from __future__ import annotations

import uuid

from pydantic import BaseModel, Field, model_validator


class DeployAllConfig(BaseModel):
    """Arguments and options for a full build-push-deploy run."""

    cluster: str = Field(min_length=1, description="Cluster to create or reuse")
    instance: str = Field(min_length=1, description="Database service instance name")
    image: str = Field(min_length=1, description="Local container image name")
    namespace: str = Field(min_length=1, description="Registry namespace")

    rollback: bool = Field(
        default=False,
        description="Undo resources created by this run when a step fails",
    )
    install_tools: bool = Field(
        default=True,
        description="Run the installer step first",
    )

    run_id: str = Field(default="", description="Unique run identifier (auto-generated)")

    @model_validator(mode="after")
    def _set_defaults(self) -> DeployAllConfig:
        if not self.run_id:
            self.run_id = uuid.uuid4().hex[:12]
        return self
