"""
Explorer Session

Drives the remote workflow for one source buffer: compile, build the
mapping tables, run symbolic execution for a contract and merge its gas
data. Results that arrive after the source was recompiled are rejected as
stale instead of being applied.
"""

import threading
from typing import Any, Dict, Optional, Tuple

from solbolt.config import SolboltConfig
from solbolt.core.mapping import CompilationMappings, MappingTable
from solbolt.core.mapping_store import MappingStore
from solbolt.core.regions import HighlightTracker
from solbolt.parsers.symexec import parse_symexec_result
from solbolt.remote.client import RemoteServiceClient
from solbolt.remote.poller import TaskKind, TaskPoller, TaskStatus
from solbolt.utils.exceptions import SolboltError, StaleGenerationError, TaskFailedError
from solbolt.utils.logging import get_logger

logger = get_logger("session")


def _unwrap(task_result: Any, kind: TaskKind) -> Any:
    """Return the payload of a task result, raising for compiler/symexec-reported errors."""
    if isinstance(task_result, dict) and "success" in task_result:
        if not task_result["success"]:
            message = str(task_result.get("result") or f"{kind.value} failed")
            raise TaskFailedError(message.split("\n")[0], kind=kind.value, output=message)
        return task_result.get("result")
    return task_result


class ExplorerSession:
    """
    Compile/symbolic-execution session against the remote service.

    The latest error of each task kind is kept in ``errors`` for display;
    it is cleared when a task of that kind succeeds.
    """

    def __init__(
        self,
        config: Optional[SolboltConfig] = None,
        client: Optional[RemoteServiceClient] = None,
        store: Optional[MappingStore] = None,
        timer_factory=threading.Timer,
    ):
        self.config = config or SolboltConfig()
        self.client = client or RemoteServiceClient(
            self.config.service.url, timeout=self.config.service.timeout
        )
        self.store = store or MappingStore()
        self.highlight = HighlightTracker()
        self.errors: Dict[TaskKind, Optional[SolboltError]] = {TaskKind.COMPILE: None, TaskKind.SYMEXEC: None}

        self.source: Optional[str] = None
        self.compiled: Optional[Dict[str, Any]] = None

        self.pollers = {
            TaskKind.COMPILE: TaskPoller(
                TaskKind.COMPILE,
                self.client.compile_status,
                on_success=self._compile_succeeded,
                on_failure=lambda e: self._record_error(TaskKind.COMPILE, e),
                timer_factory=timer_factory,
            ),
            TaskKind.SYMEXEC: TaskPoller(
                TaskKind.SYMEXEC,
                self.client.symexec_status,
                on_success=self._symexec_succeeded,
                on_failure=lambda e: self._record_error(TaskKind.SYMEXEC, e),
                timer_factory=timer_factory,
            ),
        }

    @property
    def mappings(self) -> Optional[CompilationMappings]:
        return self.store.mappings

    def table(self, contract: str) -> Optional[MappingTable]:
        return self.store.get(contract)

    def _record_error(self, kind: TaskKind, error: SolboltError) -> None:
        self.errors[kind] = error

    # -- compile ------------------------------------------------------------

    def compile(self, source: str) -> str:
        """Submit ``source`` for compilation and start polling. Returns the task id."""
        poller = self.pollers[TaskKind.COMPILE]
        # The previous job must not finish while this one is being submitted
        poller.cancel()
        task_id = self.client.submit_compile(source, self.config.compiler)
        self.errors[TaskKind.COMPILE] = None
        poller.start(task_id, context=source)
        return task_id

    def _compile_succeeded(self, task_result: Any, source: str) -> None:
        compiled = _unwrap(task_result, TaskKind.COMPILE)
        if not isinstance(compiled, dict) or source is None:
            raise TaskFailedError("Compile task returned no compiler output", kind=TaskKind.COMPILE.value)

        # A symbolic execution still running against the previous build will
        # be rejected by the store when its result arrives
        mappings = self.store.build(source, compiled)
        self.highlight.clear()
        self.source = source
        self.compiled = compiled
        self.errors[TaskKind.COMPILE] = None
        logger.info("Compiled generation %d: %s", mappings.generation, ", ".join(mappings.contract_names()))

    # -- symbolic execution -----------------------------------------------------

    def symexec(self, contract: str, source: Optional[str] = None) -> str:
        """
        Submit a symbolic execution of ``contract`` against the last build.

        Raises:
            SourceChangedError: if ``source`` differs from what was compiled.
            StaleGenerationError: if the contract is not in the current build.
        """
        source = self.source if source is None else source
        if source is None:
            raise StaleGenerationError("Nothing has been compiled yet, please compile first!")
        self.store.check_source(source)
        if self.store.get(contract) is None:
            raise StaleGenerationError(
                f"Contract {contract} is not part of the current compilation",
                current_generation=self.store.generation,
            )

        generation = self.store.generation
        poller = self.pollers[TaskKind.SYMEXEC]
        poller.cancel()
        task_id = self.client.submit_symexec(source, self.compiled, self.config.symexec, contract=contract)
        self.errors[TaskKind.SYMEXEC] = None
        poller.start(task_id, context=(contract, generation))
        return task_id

    def _symexec_succeeded(self, task_result: Any, target: Tuple[str, int]) -> None:
        document = _unwrap(task_result, TaskKind.SYMEXEC)
        contract, generation = target
        result = parse_symexec_result(document)
        self.store.merge_gas(contract, result, generation)
        self.errors[TaskKind.SYMEXEC] = None

    # -- blocking helpers ---------------------------------------------------

    def wait(self, kind: TaskKind, timeout: Optional[float] = None) -> TaskStatus:
        """Block until the task of ``kind`` finishes, raising its error if it failed."""
        poller = self.pollers[TaskKind(kind)]
        status = poller.wait(timeout)
        if status is TaskStatus.RUNNING:
            raise TaskFailedError(
                f"Timed out after {timeout}s waiting for {poller.kind.value} task",
                task_id=poller.task_id,
                kind=poller.kind.value,
            )
        if status is TaskStatus.FAILED and poller.error is not None:
            raise poller.error
        return status

    def close(self) -> None:
        for poller in self.pollers.values():
            poller.cancel()
