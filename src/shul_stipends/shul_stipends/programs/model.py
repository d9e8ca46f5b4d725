from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import ProgramKind


@dataclass(frozen=True)
class Program:
    """A morning program members can attend (the Handler track or a Kollel)."""

    program_id: int
    name: str
    kind: ProgramKind
    description: Optional[str] = None
    is_active: bool = True
