"""Tagged result values returned by every public operation.

A host transport can forward these as-is:
``{"success": true, "result": ...}`` or
``{"success": false, "error": {"code": ..., "message": ..., "details": ...}}``.
"""

from typing import Any, Literal

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class ToolSuccess(BaseModel):
    success: Literal[True] = True
    result: Any = None


class ToolError(BaseModel):
    success: Literal[False] = False
    error: ErrorDetail


ToolResponse = ToolSuccess | ToolError
