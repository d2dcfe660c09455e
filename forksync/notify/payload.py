"""
Card Payload — Interactive template card for the chat bot webhook.

The bot renders a pre-registered card template and fills three variables:

{
    "msg_type": "interactive",
    "card": {
        "type": "template",
        "data": {
            "template_id": "AAqvdoOm73Z30",
            "template_version_name": "1.0.1",
            "template_variable": {
                "title": "Successfully rebased 3 commits",
                "msg_body": "commit list:\\n- ...",
                "color": "green"
            }
        }
    }
}
"""

from __future__ import annotations

from typing import Any, Dict, Literal

from pydantic import BaseModel, Field

Color = Literal["green", "red", "blue", "orange", "grey"]


class TemplateVariables(BaseModel):
    """Values substituted into the card template."""

    title: str
    msg_body: str
    color: Color = "green"


class TemplateData(BaseModel):
    template_id: str
    template_version_name: str
    template_variable: TemplateVariables


class TemplateCard(BaseModel):
    type: Literal["template"] = "template"
    data: TemplateData


class CardMessage(BaseModel):
    """Top-level webhook body."""

    msg_type: Literal["interactive"] = "interactive"
    card: TemplateCard

    @classmethod
    def build(
        cls,
        template_id: str,
        template_version: str,
        title: str,
        body: str,
        color: Color,
    ) -> "CardMessage":
        """Create a card message for the given template."""
        return cls(
            card=TemplateCard(
                data=TemplateData(
                    template_id=template_id,
                    template_version_name=template_version,
                    template_variable=TemplateVariables(
                        title=title,
                        msg_body=body,
                        color=color,
                    ),
                ),
            ),
        )

    @property
    def title(self) -> str:
        return self.card.data.template_variable.title

    @property
    def color(self) -> str:
        return self.card.data.template_variable.color

    @property
    def body(self) -> str:
        return self.card.data.template_variable.msg_body

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


def failure_body(output: str) -> str:
    """Wrap raw tool output in a shell code block."""
    return f"Failure information:\n```shell\n{output}\n```"
