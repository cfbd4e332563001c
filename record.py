#########################################
# Description: This file describes the credential record dataclass.
#########################################

from dataclasses import dataclass, replace
from typing import Optional

@dataclass
class Record:
    id: Optional[int] = None
    title: str = ""
    username: str = ""
    password: str = ""

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def with_id(self, record_id: int) -> "Record":
        return replace(self, id=record_id)
