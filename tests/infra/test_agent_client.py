"""Tests for the multi-round tool loop in infra/llm/agent/client.py."""

import json

import pytest

from infra.cancellation import CancellationToken, PipelineCancelled
from infra.llm.agent import AgentClient
from tests.fakes import FakeLLMClient, tool_call


class Recorder:
    """execute_tool stand-in that completes on a 'done' call."""

    def __init__(self):
        self.calls = []
        self.done = False

    def __call__(self, name, arguments):
        self.calls.append((name, arguments))
        if name == "done":
            self.done = True
        if name == "explode":
            raise RuntimeError("handler blew up")
        return json.dumps({"ok": name})


def run(client, recorder, **kwargs):
    agent = AgentClient(max_iterations=kwargs.pop("max_iterations", 5), **kwargs)
    return agent.run(
        llm_client=client,
        model="test/model",
        initial_messages=[{"role": "user", "content": "go"}],
        tools=[],
        execute_tool=recorder,
        is_complete=lambda messages: recorder.done,
    )


class TestAgentClient:

    def test_runs_tools_until_complete(self):
        client = FakeLLMClient(tool_turns=[
            (None, [tool_call("read", {"page": 1})]),
            ("finished", [tool_call("done", {}, "call_2")]),
        ])
        recorder = Recorder()

        result = run(client, recorder)

        assert result.success
        assert result.iterations == 2
        assert recorder.calls == [("read", {"page": 1}), ("done", {})]
        assert result.total_prompt_tokens == 20
        tool_messages = [m for m in result.final_messages if m["role"] == "tool"]
        assert tool_messages[0]["tool_call_id"] == "call_1"

    def test_text_reply_gets_continue_prompt(self):
        client = FakeLLMClient(tool_turns=[
            ("thinking out loud", None),
            (None, [tool_call("done", {})]),
        ])
        result = run(client, Recorder())

        assert result.success
        second_request = client.requests[1]["messages"]
        assert second_request[-1]["role"] == "user"
        assert "continue" in second_request[-1]["content"]

    def test_handler_exception_returned_to_model(self):
        client = FakeLLMClient(tool_turns=[
            (None, [tool_call("explode", {})]),
            (None, [tool_call("done", {})]),
        ])
        result = run(client, Recorder())

        assert result.success
        tool_message = [m for m in result.final_messages if m["role"] == "tool"][0]
        assert "handler blew up" in tool_message["content"]

    def test_iteration_limit(self):
        client = FakeLLMClient(tool_turns=[(None, [tool_call("read", {})])] * 3)
        result = run(client, Recorder(), max_iterations=3)

        assert not result.success
        assert result.iterations == 3
        assert "3 iterations" in result.error_message

    def test_llm_failure_ends_run_with_exception(self):
        client = FakeLLMClient(tool_turns=[ConnectionError("reset")])
        result = run(client, Recorder())

        assert not result.success
        assert isinstance(result.exception, ConnectionError)

    def test_cancellation_propagates(self):
        token = CancellationToken()
        token.cancel("stop")
        with pytest.raises(PipelineCancelled):
            run(FakeLLMClient(), Recorder(), cancel=token)

    def test_run_log_written(self, tmp_path):
        client = FakeLLMClient(tool_turns=[(None, [tool_call("done", {})])])
        result = run(client, Recorder(), log_dir=tmp_path, log_filename="run-001.json")

        assert result.run_log_path == tmp_path / "run-001.json"
        log = json.loads(result.run_log_path.read_text())
        assert log["metadata"]["success"] is True
        assert log["iterations"][0]["tool_executions"][0]["tool_name"] == "done"
