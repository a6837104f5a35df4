from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Trigger:
    event: str
    settings: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Step:
    name: str = ""
    uses: str = ""
    run: str = ""
    with_args: Dict[str, Any] = field(default_factory=dict)

    @property
    def label(self) -> str:
        return self.name or self.uses or (self.run.splitlines()[0] if self.run else "<empty step>")


@dataclass(frozen=True)
class Job:
    job_id: str
    name: str
    runs_on: str
    needs: List[str]
    steps: List[Step]
    matrix: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Workflow:
    name: str
    source_path: str
    triggers: List[Trigger]
    jobs: Dict[str, Job]

    def trigger(self, event: str) -> Optional[Trigger]:
        for t in self.triggers:
            if t.event == event:
                return t
        return None

    @property
    def needs_map(self) -> Dict[str, List[str]]:
        return {job_id: list(job.needs) for job_id, job in self.jobs.items()}
