"""
Remote Service Client

HTTP client for the compiler and symbolic-execution service. Both jobs are
asynchronous on the service side: submitting returns a task id, and the
task is then polled until it reports SUCCESS or FAILURE.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from solbolt.config import CompilerSettings, SymexecSettings
from solbolt.utils.exceptions import ServiceError
from solbolt.utils.logging import get_logger

logger = get_logger("remote")

TASK_PENDING = "PENDING"
TASK_SUCCESS = "SUCCESS"
TASK_FAILURE = "FAILURE"


@dataclass
class PollResult:
    """One answer of a task status endpoint."""
    status: Optional[str] = None
    result: Any = None
    not_found: bool = False

    @property
    def is_pending(self) -> bool:
        return not self.not_found and self.status not in (TASK_SUCCESS, TASK_FAILURE)

    @property
    def is_success(self) -> bool:
        return self.status == TASK_SUCCESS

    @property
    def is_failure(self) -> bool:
        return self.status == TASK_FAILURE

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "PollResult":
        return cls(status=data.get("task_status"), result=data.get("task_result"))


class RemoteServiceClient:
    """
    Client for the remote compiler/symbolic-execution service.

    Endpoints, relative to ``base_url``:
        POST /compile/               submit a compilation
        GET  /compile/status/<id>    poll it
        POST /symexec/               submit a symbolic execution
        GET  /symexec/status/<id>    poll it
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:5000",
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            base_url: URL of the service
            timeout: Request timeout in seconds
            session: Optional requests session (for connection reuse or tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _make_request(self, method: str, path: str, data: Optional[Dict] = None) -> requests.Response:
        """Make an HTTP request, raising ServiceError on transport failures."""
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            return self.session.request(method, url, json=data, timeout=self.timeout)
        except requests.exceptions.Timeout:
            raise ServiceError(f"Request to {url} timed out after {self.timeout}s", url=url)
        except requests.exceptions.RequestException as e:
            raise ServiceError(f"Connection failed: {e}", url=url)

    def _json(self, response: requests.Response) -> Dict[str, Any]:
        if response.status_code != 200:
            raise ServiceError(
                f"HTTP {response.status_code}: {self._error_message(response)}",
                url=response.url,
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError:
            raise ServiceError("Service returned invalid JSON", url=response.url,
                               status_code=response.status_code)

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.reason or "request failed"
        message = body.get("status") or body.get("error") or body.get("message") or response.reason
        # Compiler diagnostics are multi-line; the first line names the problem
        return str(message).split("\n")[0]

    def _submit(self, path: str, payload: Dict[str, Any]) -> str:
        data = self._json(self._make_request("POST", path, payload))
        task_id = data.get("task_id") or data.get("taskId")
        if not task_id:
            raise ServiceError(f"Service did not return a task id for {path}",
                               url=f"{self.base_url}{path}")
        logger.info("Submitted %s task %s", path.strip("/"), task_id)
        return str(task_id)

    def _status(self, path: str) -> PollResult:
        response = self._make_request("GET", path)
        if response.status_code == 404:
            return PollResult(not_found=True)
        return PollResult.from_response(self._json(response))

    def submit_compile(self, source: str, settings: Optional[CompilerSettings] = None) -> str:
        """Submit ``source`` for compilation, returning the task id."""
        settings = settings or CompilerSettings()
        return self._submit("/compile/", {"content": source, "settings": settings.to_dict()})

    def compile_status(self, task_id: str) -> PollResult:
        return self._status(f"/compile/status/{task_id}")

    def submit_symexec(
        self,
        source: str,
        compiled: Dict[str, Any],
        settings: Optional[SymexecSettings] = None,
        contract: Optional[str] = None,
    ) -> str:
        """Submit a symbolic execution of the compiled ``contract``, returning the task id."""
        settings = settings or SymexecSettings()
        payload = {"content": source, "compiled": compiled, "settings": settings.to_dict()}
        if contract:
            payload["contract"] = contract
        return self._submit("/symexec/", payload)

    def symexec_status(self, task_id: str) -> PollResult:
        return self._status(f"/symexec/status/{task_id}")
