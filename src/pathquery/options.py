from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class CompilerOptions:
    # False: -[...]-   True: owner -[...]-> target
    directed: bool = False
    asc_keyword: str = "ASC"
    desc_keyword: str = "DESC"

    def keyword(self, direction: str) -> str:
        if direction == "ASC":
            return self.asc_keyword
        if direction == "DESC":
            return self.desc_keyword
        raise ValueError(f"Unsupported order direction: {direction!r}")

    @classmethod
    def from_dict(cls, cfg: Optional[Mapping[str, Any]]) -> "CompilerOptions":
        """Build from an agent-style ``cfg`` dict; unknown keys are ignored."""
        if not cfg:
            return cls()
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {k: v for k, v in cfg.items() if k in known}
        return cls(**kwargs)
