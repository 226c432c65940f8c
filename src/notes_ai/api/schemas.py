from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from notes_ai.providers.llm.types import GenerationParameters, GenerationRequest, SchemaDescriptor


class ResponseSchemaBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    type: str = "object"
    properties: dict[str, dict[str, Any]] = Field(default_factory=dict)
    required: list[str] | None = None
    additional_properties: bool | None = Field(default=None, alias="additionalProperties")


class ParametersBody(BaseModel):
    temperature: float | None = None
    top_p: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    max_tokens: int | None = None


class GenerateRequest(BaseModel):
    system_message: str = Field(..., description="System prompt defining the model's role.")
    user_message: str = Field(..., description="User prompt carrying the task, e.g. raw meeting notes.")
    model_name: str | None = Field(default=None, description="provider/model-name, e.g. openai/gpt-5-nano.")
    response_schema: ResponseSchemaBody | None = None
    parameters: ParametersBody | None = None
    user_id: str | None = None
    note_id: str | None = None

    def to_generation_request(self) -> GenerationRequest:
        schema = None
        if self.response_schema is not None:
            schema = SchemaDescriptor(
                name=self.response_schema.name,
                type=self.response_schema.type,
                properties=self.response_schema.properties,
                required=self.response_schema.required,
                additional_properties=self.response_schema.additional_properties,
            )
        parameters = None
        if self.parameters is not None:
            parameters = GenerationParameters(**self.parameters.model_dump())
        return GenerationRequest(
            system_message=self.system_message,
            user_message=self.user_message,
            model_name=self.model_name,
            response_schema=schema,
            parameters=parameters,
            user_id=self.user_id,
            note_id=self.note_id,
        )


class GenerateResponse(BaseModel):
    data: Any
    metadata: dict
