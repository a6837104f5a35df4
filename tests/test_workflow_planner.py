from __future__ import annotations

import unittest

from _testutil import ensure_repo_on_path


def _workflow(needs):
    ensure_repo_on_path()

    from actions_lab.workflows.models import Job, Step, Workflow

    jobs = {
        job_id: Job(job_id=job_id, name=job_id, runs_on="ubuntu-latest", needs=list(deps), steps=[Step(run="true")])
        for job_id, deps in needs.items()
    }
    return Workflow(name="t", source_path="t.yml", triggers=[], jobs=jobs)


class TestTopoSort(unittest.TestCase):
    def test_order_and_errors(self) -> None:
        ensure_repo_on_path()

        from actions_lab.workflows.planner import topo_sort

        order = topo_sort(["hello", "lint", "test"], {"hello": ["test"], "test": ["lint"]})
        self.assertEqual(order, ["lint", "test", "hello"])

        with self.assertRaises(ValueError):
            topo_sort(["a"], {"a": ["ghost"]})
        with self.assertRaises(ValueError):
            topo_sort(["a", "b"], {"a": ["b"], "b": ["a"]})


class TestStages(unittest.TestCase):
    def setUp(self) -> None:
        ensure_repo_on_path()

    def test_lint_gates_parallel_jobs(self) -> None:
        from actions_lab.workflows.planner import blocked_by_failure, plan_stages

        wf = _workflow({"lint": [], "test": ["lint"], "verify": ["lint"], "hello": ["test", "verify"], "docs": []})
        self.assertEqual(plan_stages(wf), [["docs", "lint"], ["test", "verify"], ["hello"]])
        self.assertEqual(blocked_by_failure(wf, "lint"), ["hello", "test", "verify"])
        self.assertEqual(blocked_by_failure(wf, "test"), ["hello"])
        self.assertEqual(blocked_by_failure(wf, "hello"), [])

        with self.assertRaises(ValueError):
            blocked_by_failure(wf, "nope")

    def test_empty_and_cyclic(self) -> None:
        from actions_lab.workflows.planner import plan_stages

        self.assertEqual(plan_stages(_workflow({})), [])
        with self.assertRaises(ValueError):
            plan_stages(_workflow({"a": ["b"], "b": ["a"]}))


class TestExpandMatrix(unittest.TestCase):
    def test_product_exclude_include(self) -> None:
        ensure_repo_on_path()

        from actions_lab.workflows.planner import expand_matrix

        self.assertEqual(expand_matrix({}), [{}])

        combos = expand_matrix({"os": ["ubuntu", "windows"], "python": ["3.11", "3.12"]})
        self.assertEqual(
            combos,
            [
                {"os": "ubuntu", "python": "3.11"},
                {"os": "ubuntu", "python": "3.12"},
                {"os": "windows", "python": "3.11"},
                {"os": "windows", "python": "3.12"},
            ],
        )

        combos = expand_matrix(
            {
                "os": ["ubuntu", "windows"],
                "python": ["3.11", "3.12"],
                "exclude": [{"os": "windows", "python": "3.11"}],
                "include": [
                    {"python": "3.12", "experimental": True},
                    {"os": "macos", "python": "3.12"},
                ],
            }
        )
        self.assertEqual(
            combos,
            [
                {"os": "ubuntu", "python": "3.11"},
                {"os": "ubuntu", "python": "3.12", "experimental": True},
                {"os": "windows", "python": "3.12", "experimental": True},
                {"os": "macos", "python": "3.12"},
            ],
        )

    def test_include_without_axis_keys_extends_all(self) -> None:
        ensure_repo_on_path()

        from actions_lab.workflows.planner import expand_matrix

        combos = expand_matrix({"python": ["3.11", "3.12"], "include": [{"coverage": True}]})
        self.assertEqual(combos, [{"python": "3.11", "coverage": True}, {"python": "3.12", "coverage": True}])

        self.assertEqual(expand_matrix({"include": [{"python": "3.12"}]}), [{"python": "3.12"}])

    def test_scalar_and_expression_axes_are_one_leg(self) -> None:
        ensure_repo_on_path()

        from actions_lab.workflows.planner import expand_matrix, is_expression

        self.assertEqual(expand_matrix({"os": "ubuntu-latest"}), [{"os": "ubuntu-latest"}])

        expr = "${{ fromJson(needs.setup.outputs.versions) }}"
        self.assertTrue(is_expression(expr))
        self.assertFalse(is_expression("3.12"))
        combos = expand_matrix({"python-version": expr, "os": ["ubuntu", "windows"]})
        self.assertEqual(len(combos), 2)
        self.assertEqual({c["python-version"] for c in combos}, {expr})


if __name__ == "__main__":
    unittest.main()
