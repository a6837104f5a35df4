from __future__ import annotations

import os
import unittest
from unittest import mock

from _testutil import ensure_repo_on_path


def _response(status_code: int, payload=None, text: str = ""):
    r = mock.Mock()
    r.status_code = status_code
    r.json.return_value = payload
    r.text = text
    return r


class TestActionsApi(unittest.TestCase):
    def setUp(self) -> None:
        ensure_repo_on_path()
        self._env = mock.patch.dict(os.environ, {}, clear=False)
        self._env.start()
        for k in ("GITHUB_TOKEN", "GITHUB_REPOSITORY", "GITHUB_API_URL"):
            os.environ.pop(k, None)

    def tearDown(self) -> None:
        self._env.stop()

    def test_env_helpers(self) -> None:
        from actions_lab.errors import NotConfiguredError
        from actions_lab.github.actions_api import get_repo_from_env, get_token_from_env

        with self.assertRaises(NotConfiguredError):
            get_repo_from_env()
        with self.assertRaises(NotConfiguredError):
            get_token_from_env()

        os.environ["GITHUB_REPOSITORY"] = "not-a-slug"
        with self.assertRaises(NotConfiguredError):
            get_repo_from_env()

        os.environ["GITHUB_REPOSITORY"] = "octo/lab"
        os.environ["GITHUB_TOKEN"] = " t0k "
        self.assertEqual(get_repo_from_env(), "octo/lab")
        self.assertEqual(get_token_from_env(), "t0k")

    def test_list_workflow_runs(self) -> None:
        from actions_lab.github.actions_api import list_workflow_runs

        payload = {
            "total_count": 1,
            "workflow_runs": [
                {
                    "id": 42,
                    "name": "Hello World",
                    "status": "completed",
                    "conclusion": "success",
                    "event": "workflow_dispatch",
                    "head_branch": "main",
                    "html_url": "https://github.com/octo/lab/actions/runs/42",
                },
            ],
        }
        with mock.patch("requests.get", return_value=_response(200, payload)) as get:
            runs = list_workflow_runs("octo/lab", "tok", workflow_file="hello.yml", per_page=5)

        self.assertEqual(len(runs), 1)
        self.assertEqual(runs[0].id, 42)
        self.assertEqual(runs[0].conclusion, "success")
        self.assertEqual(runs[0].event, "workflow_dispatch")

        args, kwargs = get.call_args
        self.assertEqual(args[0], "https://api.github.com/repos/octo/lab/actions/workflows/hello.yml/runs")
        self.assertEqual(kwargs["params"], {"per_page": 5})
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer tok")

    def test_list_runs_repo_wide_and_in_progress(self) -> None:
        from actions_lab.github.actions_api import list_workflow_runs

        payload = {"workflow_runs": [{"id": 7, "status": "in_progress", "conclusion": None}]}
        with mock.patch("requests.get", return_value=_response(200, payload)) as get:
            runs = list_workflow_runs("octo/lab", "tok")
        self.assertEqual(get.call_args[0][0], "https://api.github.com/repos/octo/lab/actions/runs")
        self.assertEqual(runs[0].conclusion, "")
        self.assertEqual(runs[0].status, "in_progress")

    def test_list_runs_error(self) -> None:
        from actions_lab.errors import GitHubApiError
        from actions_lab.github.actions_api import list_workflow_runs

        with mock.patch("requests.get", return_value=_response(404, text="Not Found")):
            with self.assertRaises(GitHubApiError) as ctx:
                list_workflow_runs("octo/lab", "tok", workflow_file="nope.yml")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertIn("Not Found", str(ctx.exception))

    def test_dispatch_workflow(self) -> None:
        from actions_lab.errors import GitHubApiError
        from actions_lab.github.actions_api import dispatch_workflow

        os.environ["GITHUB_API_URL"] = "https://ghe.example.com/api/v3/"
        with mock.patch("requests.post", return_value=_response(204)) as post:
            dispatch_workflow("octo/lab", "tok", "hello.yml", ref="dev", inputs={"who": "octocat"})

        args, kwargs = post.call_args
        expected_url = "https://ghe.example.com/api/v3/repos/octo/lab/actions/workflows/hello.yml/dispatches"
        self.assertEqual(args[0], expected_url)
        self.assertEqual(kwargs["json"], {"ref": "dev", "inputs": {"who": "octocat"}})

        rejected = _response(422, text="Workflow does not have 'workflow_dispatch' trigger")
        with mock.patch("requests.post", return_value=rejected):
            with self.assertRaises(GitHubApiError) as ctx:
                dispatch_workflow("octo/lab", "tok", "lint.yml")
        self.assertEqual(ctx.exception.status_code, 422)


if __name__ == "__main__":
    unittest.main()
