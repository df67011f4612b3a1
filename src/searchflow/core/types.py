from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class SearchResult:
    title: str
    url: str
    snippet: str = ""
    engines: List[str] = field(default_factory=list)
    score: float = 0.0


@dataclass
class EnrichedResult:
    title: str
    url: str
    snippet: str = ""
    engines: List[str] = field(default_factory=list)
    score: float = 0.0
    summary: Optional[str] = None

    @classmethod
    def from_search_result(cls, result: SearchResult, summary: Optional[str] = None) -> "EnrichedResult":
        return cls(
            title=result.title,
            url=result.url,
            snippet=result.snippet,
            engines=list(result.engines),
            score=result.score,
            summary=summary,
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready form. ``summary`` is left out when absent."""
        data = asdict(self)
        if data["summary"] is None:
            data.pop("summary")
        return data
