#!/usr/bin/env python3
"""
🚀 Remote Test Definitions
==========================
Maps an order load test scenario onto the distributed load testing
orchestrator's test definition (task count, concurrency, ramp-up, hold-for).

Unknown scenario names do not abort here: a warning is logged and the
normal scenario is used, so a scheduled remote launch always goes out.

Usage:
    python remote_trigger.py peak
    python remote_trigger.py normal --region eu-west-1 --script order_load_test.js -o test.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from scenarios import Scenario, ScenarioSpec, format_duration, lookup_with_fallback

logger = logging.getLogger(__name__)
console = Console()

DEFAULT_REGION = "us-east-1"
DEFAULT_SCRIPT = "load-test-k6.js"


def build_test_definition(
    scenario: Scenario,
    spec: ScenarioSpec,
    script_name: str = DEFAULT_SCRIPT,
    region: str = DEFAULT_REGION,
    test_name: Optional[str] = None,
) -> Dict[str, Any]:
    """Test definition body for the orchestrator's create-test API."""
    name = test_name or f"order-load-test-{scenario.value}"
    return {
        "testName": name,
        "testDescription": (
            f"{spec.iterations} synthetic orders, {spec.virtual_workers} workers, "
            f"max {format_duration(spec.max_duration)}"
        ),
        "testType": "k6",
        "fileType": "script",
        "showLive": False,
        "testTaskConfigs": [
            {
                "region": region,
                "taskCount": spec.remote_task_count,
                "concurrency": spec.remote_concurrency,
            }
        ],
        "testScenario": {
            "execution": [
                {
                    "ramp-up": f"{spec.remote_ramp_up}s",
                    "hold-for": f"{spec.remote_hold_for}s",
                    "scenario": name,
                    "executor": "k6",
                }
            ],
            "scenarios": {
                name: {"script": script_name},
            },
        },
    }


def resolve_definition(
    name: str,
    script_name: str = DEFAULT_SCRIPT,
    region: str = DEFAULT_REGION,
) -> Dict[str, Any]:
    """Resolve a scenario name (falling back to normal) and build its definition."""
    scenario, spec = lookup_with_fallback(name)
    return build_test_definition(scenario, spec, script_name=script_name, region=region)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="🚀 Build a remote order load test definition")
    parser.add_argument("scenario", nargs="?", default="normal", help="quick, normal or peak")
    parser.add_argument("--region", default=DEFAULT_REGION, help="Region for the test tasks")
    parser.add_argument("--script", default=DEFAULT_SCRIPT, help="Uploaded test script name")
    parser.add_argument("--output", "-o", help="Write the definition to this file")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    definition = resolve_definition(args.scenario, script_name=args.script, region=args.region)
    task = definition["testTaskConfigs"][0]
    execution = definition["testScenario"]["execution"][0]

    console.print(Panel(
        f"[bold]{definition['testName']}[/bold]\n\n"
        f"{definition['testDescription']}\n"
        f"Tasks: {task['taskCount']} | Concurrency: {task['concurrency']} | "
        f"Ramp up: {execution['ramp-up']} | Hold for: {execution['hold-for']}",
        title="🚀 Remote Test Definition",
        border_style="blue"
    ))

    json_str = json.dumps(definition, indent=2)
    if args.output:
        Path(args.output).write_text(json_str)
        console.print(f"[green]Definition saved to: {args.output}[/green]")
    else:
        console.print_json(json_str)
    return 0


if __name__ == "__main__":
    sys.exit(main())
