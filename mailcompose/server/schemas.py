from typing import Any

from pydantic import BaseModel, Field, model_validator

_CAMEL_ALIASES = {
    "templateId": "template_id",
    "generationPrompt": "generation_prompt",
    "templateType": "template_type",
}


def _accept_camel_case(data: Any) -> Any:
    if isinstance(data, dict):
        for camel, snake in _CAMEL_ALIASES.items():
            if camel in data and snake not in data:
                data[snake] = data.pop(camel)
    return data


class ValidateRequest(BaseModel):
    html: str = Field(default="", description="Email HTML to check.")


class RecipientsPayload(BaseModel):
    to: list[str] = Field(default_factory=list, examples=[["jane@example.com"]])
    cc: list[str] | None = None
    bcc: list[str] | None = None


class TemplateCreateRequest(BaseModel):
    name: str
    subject: str
    html: str
    template_type: str = Field(default="custom")
    images: list[str] = Field(default_factory=list)
    generation_prompt: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _compat_camel_case(cls, data: Any) -> Any:
        """Accept the editor's camelCase keys as aliases."""
        return _accept_camel_case(data)


class TemplateUpdateRequest(BaseModel):
    name: str | None = None
    subject: str | None = None
    html: str | None = None
    template_type: str | None = None
    images: list[str] | None = None
    generation_prompt: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _compat_camel_case(cls, data: Any) -> Any:
        return _accept_camel_case(data)

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class DuplicateTemplateRequest(BaseModel):
    name: str | None = None


class SendEmailRequest(BaseModel):
    template_id: str = Field(default="")
    recipients: RecipientsPayload | None = None
    subject: str = Field(default="")
    customizations: dict[str, str] | None = Field(
        default=None,
        examples=[{"first_name": "Jane"}],
        description="Values substituted into {{key}} placeholders before sending.",
    )

    @model_validator(mode="before")
    @classmethod
    def _compat_camel_case(cls, data: Any) -> Any:
        return _accept_camel_case(data)
