from __future__ import annotations

import base64
from typing import List

from langchain_core.messages import BaseMessage, HumanMessage
from pydantic import BaseModel, ConfigDict

from .image_data import ImageMetadata, UploadedImage


class AnalysisRequest(BaseModel):
    """Fixed instruction plus one inline image, sent as a single user turn."""

    model_config = ConfigDict(frozen=True)

    instruction: str
    content_type: str
    base64_data: str

    @classmethod
    def from_upload(cls, image: UploadedImage, *, instruction: str) -> "AnalysisRequest":
        return cls(
            instruction=instruction,
            content_type=image.content_type,
            base64_data=base64.b64encode(image.data).decode("ascii"),
        )

    @property
    def data_url(self) -> str:
        return f"data:{self.content_type};base64,{self.base64_data}"

    def to_messages(self) -> List[BaseMessage]:
        return [
            HumanMessage(
                content=[
                    {"type": "text", "text": self.instruction},
                    {"type": "image_url", "image_url": {"url": self.data_url}},
                ]
            )
        ]


class AnalysisResult(BaseModel):
    text: str
    metadata: ImageMetadata
