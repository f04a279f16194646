from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BlogSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    blog_id: int
    url: str


class PostSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    post_id: int
    title: str
    content: str | None = None
    blog_id: int
