"""Static reading of a workflow's job graph.

Nothing here runs jobs. The helpers only answer questions about what the
`needs` keyword and `strategy.matrix` imply: which jobs may run side by side,
which jobs a failure would skip, and how many matrix legs a job fans out to.
"""

from __future__ import annotations

import itertools
from typing import Any, Dict, List, Set

from .models import Workflow


def is_expression(value: Any) -> bool:
    """True for a `${{ ... }}` expression that is only known at run time."""
    return isinstance(value, str) and value.strip().startswith("${{") and value.strip().endswith("}}")


def topo_sort(jobs: List[str], deps: Dict[str, List[str]]) -> List[str]:
    """Topo sort restricted to `jobs`. Raises ValueError on missing deps or cycles."""
    wanted = list(dict.fromkeys(jobs))
    wanted_set = set(wanted)

    missing: Set[str] = set()
    for j in wanted:
        for d in deps.get(j, []):
            if d and d not in wanted_set:
                missing.add(d)
    if missing:
        raise ValueError(f"Jobs reference unknown dependencies: {sorted(missing)}")

    temporary: Set[str] = set()
    permanent: Set[str] = set()
    result: List[str] = []

    def visit(n: str) -> None:
        if n in permanent:
            return
        if n in temporary:
            raise ValueError(f"Dependency cycle detected at job {n}")
        temporary.add(n)
        for d in deps.get(n, []):
            visit(d)
        temporary.remove(n)
        permanent.add(n)
        result.append(n)

    for j in wanted:
        if j not in permanent:
            visit(j)

    return result


def plan_stages(workflow: Workflow) -> List[List[str]]:
    """Group jobs into stages; a job's stage is one past its deepest dependency."""
    deps = workflow.needs_map
    order = topo_sort(list(workflow.jobs.keys()), deps)

    depth: Dict[str, int] = {}
    for job_id in order:
        parents = deps.get(job_id, [])
        depth[job_id] = 1 + max((depth[p] for p in parents), default=-1)

    stages: List[List[str]] = [[] for _ in range(max(depth.values(), default=-1) + 1)]
    for job_id, d in depth.items():
        stages[d].append(job_id)
    return [sorted(s) for s in stages]


def blocked_by_failure(workflow: Workflow, failed_job: str) -> List[str]:
    """Jobs skipped when `failed_job` fails, i.e. its transitive dependents."""
    if failed_job not in workflow.jobs:
        raise ValueError(f"Unknown job: {failed_job}")

    dependents: Dict[str, List[str]] = {j: [] for j in workflow.jobs}
    for job_id, parents in workflow.needs_map.items():
        for p in parents:
            dependents.setdefault(p, []).append(job_id)

    blocked: Set[str] = set()
    frontier = [failed_job]
    while frontier:
        cur = frontier.pop()
        for child in dependents.get(cur, []):
            if child not in blocked:
                blocked.add(child)
                frontier.append(child)
    return sorted(blocked)


def _matches(combo: Dict[str, Any], partial: Dict[str, Any]) -> bool:
    return all(k in combo and combo[k] == v for k, v in partial.items())


def _axis_values(raw: Any) -> List[Any]:
    # A scalar or an expression axis is a single opaque value, not a sequence.
    if isinstance(raw, list):
        return list(raw)
    return [raw]


def expand_matrix(matrix: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Expand a strategy matrix into its concrete combinations.

    Axes are combined in declaration order. `exclude` entries remove every
    combination they match. Each `include` entry extends the combinations
    whose original axis values it matches without overwriting any of them;
    an include that extends nothing is appended as its own combination.
    An axis given as a `${{ ... }}` expression counts as one unknown value.
    """
    axes = {k: v for k, v in matrix.items() if k not in ("include", "exclude")}
    excludes = list(matrix.get("exclude") or [])
    includes = list(matrix.get("include") or [])

    combos: List[Dict[str, Any]] = []
    if axes:
        keys = list(axes.keys())
        for values in itertools.product(*(_axis_values(axes[k]) for k in keys)):
            combos.append(dict(zip(keys, values)))
        combos = [c for c in combos if not any(_matches(c, ex) for ex in excludes)]

    originals = [dict(c) for c in combos]
    for inc in includes:
        extended = False
        for original, combo in zip(originals, combos):
            overlap = {k: v for k, v in inc.items() if k in axes}
            if _matches(original, overlap):
                combo.update({k: v for k, v in inc.items() if k not in axes})
                extended = True
        if not extended:
            combos.append(dict(inc))

    return combos or [{}]
