from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Sequence

from ..config import LabConfig
from .models import Job, Step, Workflow
from .planner import expand_matrix, is_expression, topo_sort

ERROR = "error"
WARNING = "warning"

SETUP_PYTHON = "actions/setup-python"

_MATRIX_REF_RE = re.compile(r"^\$\{\{\s*matrix\.([A-Za-z0-9_-]+)\s*\}\}$")
_CRON_FIELD_RE = re.compile(r"^[0-9A-Za-z*/,\-?#LW]+$")
# pip, pip3, pipx, `python -m pip`, `uv pip`: installing a tool is not running it.
_INSTALL_RE = re.compile(r"\bpip[x3]?\s+install\b")


@dataclass(frozen=True)
class WorkflowIssue:
    path: str
    severity: str
    message: str

    def format(self) -> str:
        return f"{self.severity.upper()} {self.path}: {self.message}"


def has_errors(issues: Iterable[WorkflowIssue]) -> bool:
    return any(i.severity == ERROR for i in issues)


def _check_triggers(wf: Workflow, cfg: LabConfig) -> List[WorkflowIssue]:
    out: List[WorkflowIssue] = []
    if not wf.triggers:
        out.append(WorkflowIssue(f"{wf.source_path}:on", ERROR, "workflow declares no trigger events"))
    for t in wf.triggers:
        where = f"{wf.source_path}:on.{t.event}"
        if t.event not in cfg.allowed_triggers:
            allowed = ", ".join(cfg.allowed_triggers)
            out.append(WorkflowIssue(where, ERROR, f"trigger {t.event!r} is not allowed (allowed: {allowed})"))
        if t.event == "schedule":
            out.extend(_check_schedule(where, t.settings.get("entries")))
    return out


def _check_schedule(where: str, entries: Any) -> List[WorkflowIssue]:
    if not isinstance(entries, list) or not entries:
        return [WorkflowIssue(where, ERROR, "schedule must be a non-empty list of {cron: ...} entries")]
    out: List[WorkflowIssue] = []
    for i, entry in enumerate(entries):
        cron = entry.get("cron") if isinstance(entry, dict) else None
        if not isinstance(cron, str):
            out.append(WorkflowIssue(f"{where}[{i}]", ERROR, "schedule entry is missing a cron string"))
            continue
        fields = cron.split()
        if len(fields) != 5 or not all(_CRON_FIELD_RE.match(f) for f in fields):
            out.append(WorkflowIssue(f"{where}[{i}]", ERROR, f"cron {cron!r} must have exactly five fields"))
    return out


def _check_step(where: str, step: Step, cfg: LabConfig) -> List[WorkflowIssue]:
    if bool(step.uses) == bool(step.run):
        return [WorkflowIssue(where, ERROR, "step must define exactly one of 'uses' or 'run'")]
    if not step.uses:
        return []
    if step.uses.startswith("./") or step.uses.startswith("docker://"):
        return []
    if cfg.require_pinned_actions and "@" not in step.uses:
        return [WorkflowIssue(where, ERROR, f"action {step.uses!r} must be pinned with @<ref>")]
    return []


def _python_versions(job: Job, step: Step) -> List[Any]:
    raw = step.with_args.get("python-version")
    if raw is None:
        return []
    if isinstance(raw, str):
        m = _MATRIX_REF_RE.match(raw.strip())
        if m:
            axis = m.group(1)
            return [c[axis] for c in expand_matrix(job.matrix) if axis in c]
    if isinstance(raw, list):
        return list(raw)
    return [raw]


def _check_python_versions(where: str, job: Job, step: Step, cfg: LabConfig) -> List[WorkflowIssue]:
    out: List[WorkflowIssue] = []
    supported = list(cfg.python_versions)
    for v in _python_versions(job, step):
        if is_expression(v):
            continue
        if isinstance(v, float):
            out.append(WorkflowIssue(where, WARNING, f"python-version {v!r} is a YAML float; quote it in the workflow"))
            continue
        if str(v) not in cfg.python_versions:
            out.append(WorkflowIssue(where, WARNING, f"python-version {v!r} is not in supported versions {supported}"))
    return out


def _check_jobs(wf: Workflow, cfg: LabConfig) -> List[WorkflowIssue]:
    out: List[WorkflowIssue] = []
    if not wf.jobs:
        return [WorkflowIssue(f"{wf.source_path}:jobs", ERROR, "workflow defines no jobs")]

    for job_id, job in wf.jobs.items():
        jwhere = f"{wf.source_path}:jobs.{job_id}"
        if not job.runs_on:
            out.append(WorkflowIssue(jwhere, ERROR, "job is missing 'runs-on'"))
        if not job.steps:
            out.append(WorkflowIssue(jwhere, ERROR, "job has no steps"))
        for dep in job.needs:
            if dep not in wf.jobs:
                out.append(WorkflowIssue(f"{jwhere}.needs", ERROR, f"needs unknown job {dep!r}"))
            elif dep == job_id:
                out.append(WorkflowIssue(f"{jwhere}.needs", ERROR, "job cannot need itself"))
        for i, step in enumerate(job.steps):
            swhere = f"{jwhere}.steps[{i}]"
            out.extend(_check_step(swhere, step, cfg))
            if step.uses.split("@", 1)[0] == SETUP_PYTHON:
                out.extend(_check_python_versions(swhere, job, step, cfg))

    # Unknown deps are reported above; only look for cycles among known jobs.
    known = {j: [d for d in deps if d in wf.jobs and d != j] for j, deps in wf.needs_map.items()}
    try:
        topo_sort(list(wf.jobs.keys()), known)
    except ValueError as e:
        out.append(WorkflowIssue(f"{wf.source_path}:jobs", ERROR, str(e)))
    return out


def validate_workflow(wf: Workflow, cfg: LabConfig) -> List[WorkflowIssue]:
    """Run every static check on one workflow."""
    return _check_triggers(wf, cfg) + _check_jobs(wf, cfg)


def _run_lines(workflows: Sequence[Workflow]) -> List[str]:
    lines: List[str] = []
    for wf in workflows:
        for job in wf.jobs.values():
            for step in job.steps:
                lines.extend(line for line in step.run.splitlines() if not _INSTALL_RE.search(line))
    return lines


def validate_lint_coverage(workflows: Sequence[Workflow], cfg: LabConfig) -> List[WorkflowIssue]:
    """Every configured lint tool must be invoked by at least one `run` step."""
    run_text = "\n".join(_run_lines(workflows))
    out: List[WorkflowIssue] = []
    for tool in cfg.lint_tools:
        if not re.search(rf"(^|[\s/]){re.escape(tool)}(\s|$)", run_text, flags=re.MULTILINE):
            out.append(WorkflowIssue("<workflows>", ERROR, f"no workflow step runs lint tool {tool!r}"))
    return out
