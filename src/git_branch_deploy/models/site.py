# File: src/git_branch_deploy/models/site.py
from __future__ import annotations

from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Mirrors api/site/<id>.json; the bundled JSON Schema is checked first.

RichText = Union[str, List[str]]


class SiteRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    logo: Optional[str] = None
    name: str
    owner: str
    url: str
    language: List[str] = Field(default_factory=list)
    gfw: bool = False
    category: List[str] = Field(default_factory=list)
    url2: str = ""
    url3: str = ""
    rule_parse: RichText = Field(default="", alias="ruleParse")
    author: str = ""
    update_time: str = Field(default="", alias="updateTime")
    comment: List[str] = Field(default_factory=list)

    @field_validator("logo", mode="before")
    @classmethod
    def _blank_logo(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class SiteView(BaseModel):
    """
    One render state of a site detail page:
      - load: request not finished
      - fail: result holds the error detail
      - success: result holds the SiteRecord
    """

    site_id: str
    state: Literal["load", "fail", "success"] = "load"
    result: Optional[Union[SiteRecord, str]] = None
