"""
logweave CLI runner.

Entry point: `logweave plan logging.yaml`

Pipeline:
1. Parse YAML → LoggingConfig
2. Seed parameters (appDir defaults to the YAML file's directory)
3. Declare the debugger's default logger
4. Compose: load → assemble → finalize
5. Print the plan
"""

from __future__ import annotations

import sys
from pathlib import Path

from logweave.composition import PRIORITY_TAG, CompositionResult, compose
from logweave.config import LoggingConfig
from logweave.container import Container
from logweave.debugger.defaults import register_default_debugger_logger
from logweave.debugger.facility import DebugFacility
from logweave.errors import ConfigurationError
from logweave.logger.core import Logger

USAGE = "Usage: logweave plan <config.yaml> [--app-dir <dir>] [--log-dir <dir>]"


class PlanRunner:
    """
    Composes a pipeline from YAML without touching process-wide state.

    Usage:
        runner = PlanRunner()
        result = runner.plan_yaml("logging.yaml")
        result = runner.plan_config(config, {"appDir": "/srv/app"})
    """

    def __init__(self, facility: DebugFacility | None = None):
        self._log = Logger.instance()
        self._facility = facility if facility is not None else DebugFacility()

    def plan_yaml(
        self,
        yaml_path: str | Path,
        app_dir: str | None = None,
        log_dir: str | None = None,
    ) -> CompositionResult:
        yaml_path = Path(yaml_path)
        self._log.info(f"Loading config: {yaml_path}", tags={"runner"})

        config = LoggingConfig.from_yaml(yaml_path)
        parameters = {"appDir": app_dir or str(yaml_path.resolve().parent)}
        if log_dir is not None:
            parameters["logDir"] = log_dir
        return self.plan_config(config, parameters)

    def plan_config(self, config: LoggingConfig, parameters: dict) -> CompositionResult:
        container = Container(parameters)
        register_default_debugger_logger(container, self._facility)
        result = compose(config, facility=self._facility, container=container, initialize=False)
        self._log.info(
            f"Pipeline '{config.name}' composed",
            tags={"runner"},
            handlers=len(result.binding.handlers),
            processors=len(result.binding.processors),
        )
        return result


def format_plan(result: CompositionResult) -> list[str]:
    """Human-readable plan, one line per entry."""
    container = result.container
    binding = result.binding
    lines = [f"  log dir: {result.log_directory.path} ({result.log_directory.source})"]

    for title, chain in (("handlers", binding.handlers), ("processors", binding.processors)):
        lines.append(f"  {title}:")
        if not chain:
            lines.append("    (none)")
        for identity in chain:
            definition = container.get_definition(identity)
            priority = definition.get_tag(PRIORITY_TAG) or 0
            lines.append(f"    {priority:>5}  {identity}")

    if result.report.took_over_default_logger:
        lines.append("  debugger.logger → " + result.extension.prefix("adapter"))
    return lines


def run_cli(args: list[str] | None = None) -> int:
    """
    CLI entry point for `logweave plan <config.yaml>`.

    Returns exit code (0 = success, 1 = error).
    """
    if args is None:
        args = sys.argv[1:]

    if args and args[0] == "plan":
        args = args[1:]

    if len(args) < 1:
        print(USAGE)
        return 1

    yaml_path = Path(args[0])
    if not yaml_path.exists():
        print(f"Error: Config file not found: {yaml_path}")
        return 1

    options = {}
    for flag in ("--app-dir", "--log-dir"):
        if flag in args:
            idx = args.index(flag)
            if idx + 1 >= len(args):
                print(f"Error: {flag} requires a value")
                return 1
            options[flag] = args[idx + 1]

    runner = PlanRunner()
    try:
        result = runner.plan_yaml(
            yaml_path,
            app_dir=options.get("--app-dir"),
            log_dir=options.get("--log-dir"),
        )
    except ConfigurationError as exc:
        print(f"Error: {exc}")
        return 1

    print(f"✓ Pipeline '{result.extension.config.name}' composed")
    for line in format_plan(result):
        print(line)
    return 0


def main() -> None:
    sys.exit(run_cli())
