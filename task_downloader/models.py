from dataclasses import dataclass, field, replace
from typing import List


@dataclass(frozen=True)
class ObjectEntry:
    """One downloaded file. Never mutated once it has been added to a task."""
    url: str
    path: str
    name: str
    status: str = ""

    def to_dict(self) -> dict:
        return {"url": self.url, "path": self.path, "name": self.name, "status": self.status}


@dataclass
class Task:
    number: str
    objects: List[ObjectEntry] = field(default_factory=list)
    # reserved for archive packaging, which is not implemented
    archive_name: str = ""

    def snapshot(self) -> "Task":
        return replace(self, objects=list(self.objects))

    def to_dict(self) -> dict:
        return {
            "number": self.number,
            "objects": [o.to_dict() for o in self.objects],
            "archive_name": self.archive_name,
        }
