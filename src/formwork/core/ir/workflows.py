"""
Workflow types for formwork IR.

DSL Syntax:

    workflow WelcomeUser {
      trigger: { event: "user.created", entity: User }
      steps: [
        { action: sendEmail, inputs: { to: trigger.user.email, template: "welcome" } }
      ]
    }
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TriggerSpec(BaseModel):
    """
    What starts a workflow.

    Attributes:
        event: Event name, e.g. "user.created"
        entity: Entity the event concerns, if declared
    """

    event: str
    entity: str | None = None

    model_config = ConfigDict(frozen=True)


class LiteralInput(BaseModel):
    value: str | int | float | bool

    model_config = ConfigDict(frozen=True)


class TriggerRef(BaseModel):
    """A value read from the trigger payload, e.g. trigger.user.email."""

    path: list[str]

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return ".".join(["trigger", *self.path])


StepInput = LiteralInput | TriggerRef


class WorkflowStep(BaseModel):
    action: str
    inputs: dict[str, StepInput] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class WorkflowSpec(BaseModel):
    name: str
    trigger: TriggerSpec
    steps: list[WorkflowStep] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)
