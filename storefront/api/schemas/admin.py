from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ImportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    category_id: Optional[str] = Field(None, alias="categoryId")
    limit: int = Field(50, ge=1, le=500)


class DeployRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_ids: List[Any] = Field(..., alias="productIds", min_length=1)


class JobExecutionResponse(BaseModel):
    success: bool
    queue: str
    message: str
    stats: Optional[dict] = None
