from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Program


class ProgramRepository(Protocol):
    def get_by_id(self, program_id: int) -> Optional[Program]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[Program]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Program]:
        raise NotImplementedError
