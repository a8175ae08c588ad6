from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for payloads exchanged with the enrollment API.

    The API speaks camelCase; Python code uses snake_case field names and the
    alias is applied when (de)serialising.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_api(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
