"""TryEachTask - run the verification command once per scenario.

Handles:
- Command resolution per scenario (CLI args > scenario > config > default)
- Sequential dependency setup and command runs
- Scoping EMBER_TRY_CURRENT_SCENARIO to each command run
- Classification, reporting and the process exit code

Scenarios always run one at a time: dependency installs rewrite manifests and
node_modules in the shared project directory.
"""

from __future__ import annotations

import shlex
import sys
from collections.abc import Awaitable, Callable, Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..dependencies import DependencyContextApplier, adapters_from_config
from ..environment import scenario_environment
from ..errors import ConfigurationError
from ..models import DEFAULT_COMMAND, RunOptions, RunSummary, Scenario, ScenarioResult
from ..reporter import ResultReporter, WriteLine
from ..results import classify, summarize
from ..runner import run_command as default_run_command
from ..shared.logging import get_logger

if TYPE_CHECKING:
    from ..config import TryConfig
    from ..dependencies import DependencyManagerAdapter

logger = get_logger(__name__)

RunCommand = Callable[[Path, Sequence[str], Mapping[str, Any]], Awaitable[bool]]
PrintResults = Callable[[Sequence[ScenarioResult]], None]
ExitHook = Callable[[int], Any]


class TryEachTask:
    """Scenario execution engine.

    Every collaborator with a process-level side effect is a constructor
    parameter so the engine can run under test without spawning processes,
    installing packages, or exiting the interpreter.
    """

    def __init__(
        self,
        project_root: Path | str,
        config: "TryConfig | None" = None,
        options: RunOptions | None = None,
        dependency_manager_adapters: Sequence["DependencyManagerAdapter"] | None = None,
        reporter: ResultReporter | None = None,
        write_line: WriteLine | None = None,
        run_command: RunCommand | None = None,
        print_results: PrintResults | None = None,
        exit: ExitHook | None = None,
    ):
        """Initialize the task.

        Args:
            project_root: Directory commands and installs run in
            config: Loaded configuration (run-level command, adapter options)
            options: Default run options, used when run() gets none
            dependency_manager_adapters: Adapters in registration order;
                built from the config when omitted
            reporter: Output reporter (built around write_line when omitted)
            write_line: Output callable for the default reporter
            run_command: ``(root, command_args, command_options) -> bool``
            print_results: Hook receiving all results once the run ends
            exit: Called with the exit code; defaults to sys.exit
        """
        self.project_root = Path(project_root)
        self.config = config
        self.options = options or RunOptions()

        if dependency_manager_adapters is None:
            dependency_manager_adapters = adapters_from_config(config, self.project_root) if config else []
        self.applier = DependencyContextApplier(dependency_manager_adapters)

        self.reporter = reporter or ResultReporter(write_line)
        self._run_command = run_command or default_run_command
        self._print_results = print_results or self.reporter.print_results
        self._exit = exit or sys.exit

    def resolve_command(self, scenario: Scenario, options: RunOptions) -> list[str]:
        """Resolve the command line for a scenario.

        Precedence: explicit command args > scenario command > config command
        > DEFAULT_COMMAND.

        Raises:
            ConfigurationError: If the chosen command is empty
        """
        if options.command_args:
            return list(options.command_args)

        config_command = self.config.command if self.config else None
        for source, command in (("scenario", scenario.command), ("config", config_command)):
            if command is not None:
                args = shlex.split(command)
                if not args:
                    raise ConfigurationError(
                        message=f"Empty {source} command for scenario '{scenario.name}'",
                        data={"scenario": scenario.name},
                    )
                return args

        return shlex.split(DEFAULT_COMMAND)

    def _plan(self, scenarios: Sequence[Scenario], options: RunOptions) -> list[tuple[Scenario, list[str]]]:
        seen: set[str] = set()
        for scenario in scenarios:
            if not scenario.name:
                raise ConfigurationError(message="Every scenario needs a name")
            if scenario.name in seen:
                raise ConfigurationError(
                    message=f"Duplicate scenario name '{scenario.name}'",
                    data={"scenario": scenario.name},
                )
            seen.add(scenario.name)

        self.applier.check(scenarios)
        return [(scenario, self.resolve_command(scenario, options)) for scenario in scenarios]

    async def run(self, scenarios: Sequence[Scenario], options: RunOptions | None = None) -> RunSummary:
        """Run every scenario in order and report the outcome.

        Args:
            scenarios: Scenarios in declaration order
            options: Run options (defaults to the task's options)

        Returns:
            RunSummary for the whole run

        Raises:
            ConfigurationError: Before any scenario runs
            DependencyApplicationError: When an adapter fails; results of the
                scenarios completed so far are still passed to print_results

        Manifests are restored on every exit path, including cancellation,
        unless skip_cleanup is set.
        """
        options = options or self.options
        plan = self._plan(scenarios, options)
        results: list[ScenarioResult] = []

        logger.info("starting run", scenarios=len(plan), project_root=str(self.project_root))

        try:
            await self.applier.prepare()
            for scenario, command_args in plan:
                results.append(await self._run_scenario(scenario, command_args, options))
        except BaseException:
            logger.error("run aborted", completed=len(results), total=len(plan))
            self._print_results(results)
            await self._cleanup_after_error(options)
            raise

        self._print_results(results)
        summary = summarize(results)
        self.reporter.report_summary(summary)

        await self._cleanup(options)

        logger.info(
            "run finished",
            succeeded=summary.succeeded,
            failed=summary.failed,
            allowed_failures=summary.allowed_failures,
            exit_code=summary.exit_code,
        )
        self._exit(summary.exit_code)
        return summary

    async def _run_scenario(
        self,
        scenario: Scenario,
        command_args: list[str],
        options: RunOptions,
    ) -> ScenarioResult:
        log = logger.bind(scenario=scenario.name)
        self.reporter.report_scenario_start(scenario.name, command_args)

        dependency_state = await self.applier.setup(scenario)

        log.debug("running command", command=command_args)
        with scenario_environment(scenario.name):
            raw_success = bool(
                await self._run_command(self.project_root, command_args, options.command_options)
            )

        result = ScenarioResult(
            scenario_name=scenario.name,
            raw_success=raw_success,
            allowed_to_fail=scenario.allowed_to_fail,
            classification=classify(raw_success, scenario.allowed_to_fail),
            dependency_state=tuple(dependency_state),
            command=tuple(command_args),
        )
        log.info("scenario finished", classification=result.classification.value)
        self.reporter.report_scenario(result)
        return result

    async def _cleanup(self, options: RunOptions) -> None:
        if options.skip_cleanup:
            logger.info("skipping cleanup, scenario dependencies left in place")
            return
        await self.applier.cleanup()

    async def _cleanup_after_error(self, options: RunOptions) -> None:
        try:
            await self._cleanup(options)
        except Exception:
            # The original failure is re-raised by the caller
            logger.exception("cleanup after aborted run failed")
