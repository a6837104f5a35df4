from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import load_lab_config
from .errors import LabError
from .github.actions_api import (
    dispatch_workflow,
    get_repo_from_env,
    get_token_from_env,
    list_workflow_runs,
)
from .greeting import render_greeting
from .workflows.loader import load_workflow, load_workflows
from .workflows.planner import blocked_by_failure, expand_matrix, plan_stages
from .workflows.validator import WorkflowIssue, has_errors, validate_lint_coverage, validate_workflow


def _repo_root() -> Path:
    # A checkout holds this file at repo_root/actions_lab/cli.py. A regular
    # (non-editable) install lives in site-packages, so use the working directory.
    checkout = Path(__file__).resolve().parents[1]
    if (checkout / ".github" / "workflows").is_dir():
        return checkout
    return Path.cwd().resolve()


def _parse_inputs(pairs: List[str]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for raw in pairs:
        key, sep, value = raw.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Invalid --input {raw!r} (expected key=value)")
        out[key.strip()] = value
    return out


def cmd_hello(args: argparse.Namespace) -> int:
    print(render_greeting(args.name))
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    repo_root = _repo_root()
    cfg = load_lab_config(repo_root, cli_path=args.config)
    wf_dir = Path(args.workflows_dir).resolve() if args.workflows_dir else cfg.workflows_path(repo_root)

    workflows = load_workflows(wf_dir)
    issues: List[WorkflowIssue] = []
    for wf in workflows:
        issues.extend(validate_workflow(wf, cfg))
    issues.extend(validate_lint_coverage(workflows, cfg))

    for issue in issues:
        print(issue.format())
    print(f"checked {len(workflows)} workflow(s), {len(issues)} issue(s)")
    return 1 if has_errors(issues) else 0


def cmd_plan(args: argparse.Namespace) -> int:
    wf = load_workflow(Path(args.workflow_file))
    out: Dict[str, Any] = {
        "workflow": wf.name,
        "triggers": [t.event for t in wf.triggers],
        "stages": plan_stages(wf),
        "matrix_legs": {job_id: len(expand_matrix(job.matrix)) for job_id, job in wf.jobs.items()},
    }
    if args.failed:
        out["blocked_if_failed"] = {args.failed: blocked_by_failure(wf, args.failed)}
    print(json.dumps(out, indent=2))
    return 0


def cmd_runs(args: argparse.Namespace) -> int:
    runs = list_workflow_runs(
        get_repo_from_env(),
        get_token_from_env(),
        workflow_file=args.workflow,
        per_page=args.limit,
    )
    for r in runs:
        row = {
            "id": r.id,
            "name": r.name,
            "event": r.event,
            "status": r.status,
            "conclusion": r.conclusion,
            "branch": r.head_branch,
        }
        print(json.dumps(row))
    return 0


def cmd_dispatch(args: argparse.Namespace) -> int:
    repo = get_repo_from_env()
    dispatch_workflow(repo, get_token_from_env(), args.workflow_file, ref=args.ref, inputs=_parse_inputs(args.input))
    print(json.dumps({"dispatched": args.workflow_file, "repo": repo, "ref": args.ref}))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="actions-lab")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("hello", help="Print the greeting")
    sp.add_argument("--name", default=None)
    sp.set_defaults(func=cmd_hello)

    sp = sub.add_parser("verify", help="Validate workflow files against the lab config")
    sp.add_argument("--config", default=None)
    sp.add_argument("--workflows-dir", default=None)
    sp.set_defaults(func=cmd_verify)

    sp = sub.add_parser("plan", help="Show job stages and matrix size of a workflow")
    sp.add_argument("workflow_file")
    sp.add_argument("--failed", default=None, help="Show jobs skipped if this job fails")
    sp.set_defaults(func=cmd_plan)

    sp = sub.add_parser("runs", help="List recent workflow runs")
    sp.add_argument("--workflow", default=None, help="Workflow file name, e.g. hello.yml")
    sp.add_argument("--limit", type=int, default=20)
    sp.set_defaults(func=cmd_runs)

    sp = sub.add_parser("dispatch", help="Trigger a workflow_dispatch event")
    sp.add_argument("workflow_file")
    sp.add_argument("--ref", default="main")
    sp.add_argument("--input", action="append", default=[], help="key=value, repeatable")
    sp.set_defaults(func=cmd_dispatch)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return int(args.func(args))
    except (LabError, FileNotFoundError, ValueError) as e:
        print(f"[ACTIONS_LAB][FAIL] {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
