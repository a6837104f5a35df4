from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import jsonschema
import yaml

from ..errors import WorkflowFormatError
from .models import Job, Step, Trigger, Workflow
from .schema import workflow_schema


WORKFLOW_SUFFIXES = (".yml", ".yaml")


def _repair_on_key(doc: Dict[Any, Any]) -> Dict[str, Any]:
    # YAML 1.1 reads a bare `on` key as boolean True.
    out: Dict[str, Any] = {}
    for k, v in doc.items():
        key = "on" if k is True else str(k)
        out[key] = v
    return out


def _as_list(raw: Any) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return [raw]
    return [str(x) for x in raw]


def _parse_triggers(raw: Any) -> List[Trigger]:
    if isinstance(raw, str):
        return [Trigger(event=raw)]
    if isinstance(raw, list):
        return [Trigger(event=str(e)) for e in raw]
    out: List[Trigger] = []
    for event, settings in raw.items():
        if settings is None:
            settings = {}
        elif not isinstance(settings, dict):
            # schedule is a list of {cron: ...} entries
            settings = {"entries": settings}
        out.append(Trigger(event=str(event), settings=dict(settings)))
    return out


def _parse_step(raw: Dict[str, Any]) -> Step:
    return Step(
        name=str(raw.get("name") or ""),
        uses=str(raw.get("uses") or ""),
        run=str(raw.get("run") or ""),
        with_args=dict(raw.get("with") or {}),
    )


def _parse_job(job_id: str, raw: Dict[str, Any]) -> Job:
    runs_on = raw.get("runs-on")
    if isinstance(runs_on, list):
        runs_on = ", ".join(str(x) for x in runs_on)
    strategy = raw.get("strategy") or {}
    matrix = strategy.get("matrix")
    return Job(
        job_id=job_id,
        name=str(raw.get("name") or job_id),
        runs_on=str(runs_on or ""),
        needs=_as_list(raw.get("needs")),
        steps=[_parse_step(s) for s in (raw.get("steps") or [])],
        matrix=dict(matrix) if isinstance(matrix, dict) else {},
    )


def parse_workflow(doc: Dict[Any, Any], source_path: str) -> Workflow:
    """Build a Workflow from an already-parsed YAML document."""
    if not isinstance(doc, dict):
        raise WorkflowFormatError(source_path, "expected a mapping at top level")
    data = _repair_on_key(doc)

    try:
        jsonschema.validate(instance=data, schema=workflow_schema())
    except jsonschema.ValidationError as e:
        where = ".".join(str(p) for p in e.absolute_path) or "<root>"
        raise WorkflowFormatError(source_path, f"{where}: {e.message}") from e

    jobs = {str(job_id): _parse_job(str(job_id), raw or {}) for job_id, raw in data["jobs"].items()}
    return Workflow(
        name=str(data.get("name") or Path(source_path).stem),
        source_path=source_path,
        triggers=_parse_triggers(data["on"]),
        jobs=jobs,
    )


def load_workflow(path: Path) -> Workflow:
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            doc = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise WorkflowFormatError(str(path), f"invalid YAML: {e}") from e
    return parse_workflow(doc, str(path))


def discover_workflow_files(directory: Path) -> List[Path]:
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Missing workflows directory: {directory}")
    return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix in WORKFLOW_SUFFIXES)


def load_workflows(directory: Path) -> List[Workflow]:
    return [load_workflow(p) for p in discover_workflow_files(directory)]
