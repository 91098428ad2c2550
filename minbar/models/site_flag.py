"""Named boolean site flags (e.g. maintenance mode)"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SiteFlag(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    key: str = Field(alias="id")
    value: bool = False
    updated_at: Optional[int] = None

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
