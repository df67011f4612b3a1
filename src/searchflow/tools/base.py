# base.py
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

@dataclass
class ToolCallRequest:
    """Wrapper class for a tool call request
    """
    index: int
    name: str
    content: Any
    meta: Dict = field(default_factory=dict)

@dataclass
class ToolCallResult:
    """Wrapper class for a tool call result
    """
    tool_name: str
    request_content: Any
    output: Any
    meta: Dict
    error: Optional[Any]
    index: int
    call: ToolCallRequest


class BaseTool(ABC):
    """Base class for a tool"""

    name: str = "tool"
    description: str = ""
    parameters: Dict[str, Any] = {}

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        self.config: Dict[str, Any] = dict(config or {})

    @abstractmethod
    def run_one(self, call: ToolCallRequest, **kwargs: Any) -> ToolCallResult:
        """Run the tool once."""
        raise NotImplementedError

    def run_batch(self, calls: List[ToolCallRequest], **kwargs: Any) -> List[ToolCallResult]:
        """Run tool with batch inputs, one result per call in the same order.
        An exception in one call becomes an error result for that call only.
        """
        out: List[ToolCallResult] = []
        for c in calls:
            try:
                r = self.run_one(c, **kwargs)
            except Exception as e:
                r = self._make_error_result(c, f"{type(e).__name__}: {e}")
            out.append(r)
        return out

    def _make_error_result(self, call: ToolCallRequest, error_msg: str) -> ToolCallResult:
        return ToolCallResult(
            tool_name=self.name,
            request_content=getattr(call, "content", None),
            output=None,
            meta={**(getattr(call, "meta", {}) or {}), "exception": True},
            error=error_msg,
            index=getattr(call, "index", -1),
            call=call,
        )
