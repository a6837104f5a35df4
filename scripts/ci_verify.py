#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, NoReturn, Optional

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

# pylint: disable=wrong-import-position
from actions_lab.config import LabConfig, load_lab_config  # noqa: E402
from actions_lab.errors import LabError  # noqa: E402
from actions_lab.workflows.loader import load_workflows  # noqa: E402
from actions_lab.workflows.models import Workflow  # noqa: E402
from actions_lab.workflows.validator import (  # noqa: E402
    ERROR,
    validate_lint_coverage,
    validate_workflow,
)

# pylint: enable=wrong-import-position


def _die(msg: str) -> NoReturn:
    print(f"[CI_VERIFY][FAIL] {msg}", file=sys.stderr)
    raise SystemExit(2)


def _ok(msg: str) -> None:
    print(f"[CI_VERIFY][OK] {msg}")


def _warn(msg: str) -> None:
    print(f"[CI_VERIFY][WARN] {msg}")


def _verify_script(repo_root: Path) -> None:
    main_py = repo_root / "src" / "main.py"
    if not main_py.exists():
        _die(f"Missing hello script: {main_py}")
    _ok("Hello script present: src/main.py")


def _load_config(repo_root: Path, cli_path: Optional[str]) -> LabConfig:
    try:
        return load_lab_config(repo_root, cli_path=cli_path)
    except (FileNotFoundError, LabError) as e:
        _die(str(e))


def _load_workflows(wf_dir: Path) -> List[Workflow]:
    try:
        return load_workflows(wf_dir)
    except (FileNotFoundError, LabError) as e:
        _die(str(e))


def _verify_workflows(repo_root: Path, cfg: LabConfig) -> List[Workflow]:
    wf_dir = cfg.workflows_path(repo_root)
    workflows = _load_workflows(wf_dir)
    if not workflows:
        _die(f"No workflow files found in {wf_dir}")

    failed = False
    for wf in workflows:
        for issue in validate_workflow(wf, cfg):
            if issue.severity == ERROR:
                failed = True
                print(f"[CI_VERIFY][FAIL] {issue.path}: {issue.message}", file=sys.stderr)
            else:
                _warn(f"{issue.path}: {issue.message}")
    if failed:
        _die("Workflow validation failed")

    _ok(f"Workflows: {len(workflows)} file(s) valid in {cfg.workflows_dir}")
    return workflows


def _verify_lint_coverage(workflows: List[Workflow], cfg: LabConfig) -> None:
    issues = validate_lint_coverage(workflows, cfg)
    if issues:
        _die("; ".join(i.message for i in issues))
    _ok(f"Lint coverage: {', '.join(cfg.lint_tools)}")


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", default=None)
    args = ap.parse_args()

    _verify_script(REPO_ROOT)
    cfg = _load_config(REPO_ROOT, args.config)
    _ok("Lab config: schema OK")
    workflows = _verify_workflows(REPO_ROOT, cfg)
    _verify_lint_coverage(workflows, cfg)

    _ok("Verification complete")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
