"""
Youdao connector response models and error-code table.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

ERROR_MESSAGES: Dict[str, str] = {
    "101": "Missing required parameter",
    "102": "Unsupported language type",
    "103": "Text too long",
    "104": "Unsupported API type",
    "105": "Unsupported signature type",
    "106": "Unsupported response type",
    "107": "Unsupported transmission encryption type",
    "108": "Invalid appKey or signature error (check api_key)",
    "109": "Invalid batchLog format",
    "110": "No related service",
    "111": "Developer account is abnormal",
    "201": "Decryption failed, check api_key",
    "202": "Missing signature",
    "203": "Signature verification failed",
    "301": "Dictionary query failed",
    "302": "Translation query failed",
    "303": "Server-side exception",
    "401": "Account balance insufficient",
    "411": "Access frequency limited",
}


def describe_error_code(code: str) -> str:
    return ERROR_MESSAGES.get(code, "Unknown error")


class YoudaoBasic(BaseModel):
    """Dictionary block of a Youdao response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    phonetic: Optional[str] = None
    us_phonetic: Optional[str] = Field(default=None, alias="us-phonetic")
    uk_phonetic: Optional[str] = Field(default=None, alias="uk-phonetic")
    explains: Optional[List[str]] = None


class YoudaoWebEntry(BaseModel):
    """Web phrase with its translations."""

    model_config = ConfigDict(extra="ignore")

    key: str
    value: Optional[List[str]] = None


class YoudaoResponse(BaseModel):
    """Top-level response of the text translation endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    error_code: str = Field(alias="errorCode")
    translation: Optional[List[str]] = None
    basic: Optional[YoudaoBasic] = None
    web: Optional[List[YoudaoWebEntry]] = None
