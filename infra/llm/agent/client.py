import json
import time
import logging
from typing import List, Dict, Optional, Callable
from datetime import datetime
from pathlib import Path

from infra.cancellation import CancellationToken, PipelineCancelled, check_cancelled
from .schemas import AgentResult
from .logging import save_run_log

CONTINUE_PROMPT = "Please continue using the available tools to complete your task."


class AgentClient:
    def __init__(
        self,
        max_iterations: int = 25,
        log_dir: Optional[Path] = None,
        log_filename: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
        cancel: Optional[CancellationToken] = None,
        timeout: int = 120
    ):
        self.max_iterations = max_iterations
        self.log_dir = log_dir
        self.log_filename = log_filename
        self.logger = logger or logging.getLogger(__name__)
        self.cancel = cancel
        self.timeout = timeout
        self.iteration_count = 0
        self.total_prompt_tokens = 0
        self.total_completion_tokens = 0
        self.start_time = None
        self.run_log = None

    def run(
        self,
        llm_client,
        model: str,
        initial_messages: List[Dict],
        tools: List[Dict],
        execute_tool: Callable[[str, Dict], str],
        is_complete: Callable[[List[Dict]], bool],
        temperature: float = 0.0,
        max_tokens: Optional[int] = None
    ) -> AgentResult:
        """
        Run the tool loop until is_complete() holds or max_iterations is reached.

        Tool handler exceptions are reported back to the model as tool results.
        LLM failures end the run with an error result. Cancellation propagates.
        """
        self.start_time = time.time()
        messages = list(initial_messages)
        self.run_log = {
            'metadata': {
                'model': model,
                'temperature': temperature,
                'max_iterations': self.max_iterations,
                'start_time': datetime.now().isoformat(),
                'end_time': None,
                'success': None,
                'total_iterations': 0,
                'execution_time_seconds': 0.0
            },
            'initial_messages': list(initial_messages),
            'iterations': []
        }

        for iteration in range(1, self.max_iterations + 1):
            check_cancelled(self.cancel, f"agent iteration {iteration}")
            self.iteration_count = iteration
            iteration_log = {
                'iteration': iteration,
                'timestamp': datetime.now().isoformat(),
                'llm_response': None,
                'tool_executions': []
            }

            try:
                content, usage, tool_calls = llm_client.call_with_tools(
                    model=model,
                    messages=messages,
                    tools=tools,
                    temperature=temperature,
                    max_tokens=max_tokens,
                    timeout=self.timeout
                )
            except PipelineCancelled:
                raise
            except Exception as e:
                iteration_log['llm_response'] = {'error': str(e)}
                self.run_log['iterations'].append(iteration_log)
                return self._create_error_result(
                    messages,
                    f"LLM call failed in iteration {iteration}: {e}",
                    exception=e
                )

            self.total_prompt_tokens += usage.get('prompt_tokens', 0)
            self.total_completion_tokens += usage.get('completion_tokens', 0)
            iteration_log['llm_response'] = {
                'content': content,
                'tool_calls': tool_calls,
                'usage': usage
            }

            assistant_msg = {"role": "assistant", "content": content or ""}
            if tool_calls:
                assistant_msg["tool_calls"] = tool_calls
            messages.append(assistant_msg)

            if not tool_calls:
                self.run_log['iterations'].append(iteration_log)
                if is_complete(messages):
                    return self._complete(iteration, messages)
                messages.append({"role": "user", "content": CONTINUE_PROMPT})
                continue

            for tool_call in tool_calls:
                tool_name = tool_call['function']['name']
                try:
                    arguments = json.loads(tool_call['function'].get('arguments') or "{}")
                except json.JSONDecodeError:
                    arguments = {}

                tool_start = time.time()
                try:
                    result = execute_tool(tool_name, arguments)
                except PipelineCancelled:
                    raise
                except Exception as e:
                    result = json.dumps({"error": f"Tool execution failed: {e}"})
                tool_time = time.time() - tool_start

                iteration_log['tool_executions'].append({
                    'tool_call_id': tool_call.get('id'),
                    'tool_name': tool_name,
                    'arguments': arguments,
                    'result': result,
                    'execution_time_seconds': tool_time
                })
                messages.append({
                    "role": "tool",
                    "tool_call_id": tool_call.get('id'),
                    "content": result
                })

            self.run_log['iterations'].append(iteration_log)

            if is_complete(messages):
                return self._complete(iteration, messages)

        return self._create_error_result(
            messages,
            f"Agent did not complete within {self.max_iterations} iterations"
        )

    def _complete(self, iteration: int, messages: List[Dict]) -> AgentResult:
        self.logger.debug(f"Agent completed in {iteration} iterations ({time.time() - self.start_time:.1f}s)")
        return self._create_result(messages, success=True)

    def _finalize_and_save_log(self, success: bool, error_message: Optional[str] = None) -> Optional[Path]:
        self.run_log['metadata']['end_time'] = datetime.now().isoformat()
        self.run_log['metadata']['success'] = success
        self.run_log['metadata']['total_iterations'] = self.iteration_count
        self.run_log['metadata']['execution_time_seconds'] = time.time() - self.start_time if self.start_time else 0.0
        if error_message:
            self.run_log['metadata']['error_message'] = error_message
        run_timestamp = datetime.now().strftime('%Y%m%d_%H%M%S_%f')
        return save_run_log(self.run_log, self.log_dir, run_timestamp, self.logger, self.log_filename)

    def _create_result(
        self,
        messages: List[Dict],
        success: bool,
        error_message: Optional[str] = None,
        exception: Optional[BaseException] = None
    ) -> AgentResult:
        elapsed = time.time() - self.start_time if self.start_time else 0.0
        run_log_path = self._finalize_and_save_log(success, error_message)
        return AgentResult(
            success=success,
            iterations=self.iteration_count,
            total_prompt_tokens=self.total_prompt_tokens,
            total_completion_tokens=self.total_completion_tokens,
            execution_time_seconds=elapsed,
            final_messages=messages,
            run_log_path=run_log_path,
            error_message=error_message,
            exception=exception
        )

    def _create_error_result(
        self,
        messages: List[Dict],
        error_message: str,
        exception: Optional[BaseException] = None
    ) -> AgentResult:
        self.logger.warning(error_message)
        return self._create_result(messages, success=False, error_message=error_message, exception=exception)
