"""
cli.py -- headless entry point for Adjutant.

Usage
-----
# Show the tasks a blueprint would produce
adjutant plan blueprint.json

# Scaffold the project and generate every file
adjutant build blueprint.json --target ./created-projects

# Same, with the canned offline backend
adjutant build blueprint.json --provider mock

# Run the HTTP / WebSocket API
adjutant serve --port 8000

Provider settings are read from SETTINGS_FILE (see ``adjutant.config``).
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from adjutant.backends import MockBackend, ModelBackend
from adjutant.backends.parsing import parse_blueprint
from adjutant.clients import llm_client
from adjutant.config import VERSION, settings
from adjutant.errors import AdjutantError
from adjutant.logging_setup import configure_logging
from adjutant.models.agent import AgentState, TaskStatus
from adjutant.models.blueprint import ProjectBlueprint
from adjutant.services.coding_agent import CodingAgent
from adjutant.services.planner import plan_tasks
from adjutant.services.scaffold_service import scaffold_project
from adjutant.services.settings_store import SettingsStore

_STATUS_MARK = {
    TaskStatus.completed: "OK  ",
    TaskStatus.failed: "FAIL",
}


def _load_blueprint(path: str) -> ProjectBlueprint:
    try:
        raw = Path(path).expanduser().read_text(encoding="utf-8")
    except OSError as exc:
        raise AdjutantError(f"Cannot read blueprint {path}: {exc}") from exc
    return parse_blueprint(raw)


def _select_backend(provider: str | None) -> ModelBackend:
    if provider == "mock":
        return MockBackend(latency=settings.MOCK_LATENCY_SECONDS)
    return SettingsStore(settings.SETTINGS_FILE).create_backend()


# ── plan ─────────────────────────────────────────────────────────────────


def cmd_plan(args: argparse.Namespace) -> int:
    blueprint = _load_blueprint(args.blueprint)
    tasks = plan_tasks(blueprint)
    print(f"[ADJUTANT] {blueprint.meta.name}: {len(tasks)} file(s) to generate")
    for i, task in enumerate(tasks, 1):
        print(f"  {i:>3}. {task.file_path:<40s} {task.description}")
    return 0


# ── build ────────────────────────────────────────────────────────────────


class _ProgressPrinter:
    """Observer that prints each task once, when it finishes."""

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def __call__(self, state: AgentState) -> None:
        for task in state.completed_tasks:
            if task.id in self._seen:
                continue
            self._seen.add(task.id)
            line = f"  [{_STATUS_MARK[task.status]}] {task.file_path}"
            if task.error:
                line += f"  -- {task.error}"
            print(line)


async def _build(blueprint: ProjectBlueprint, target: str, backend: ModelBackend) -> AgentState:
    try:
        result = await scaffold_project(target, blueprint)
        if not result.success:
            raise AdjutantError(result.error or "Failed to scaffold project")
        print(f"[ADJUTANT] Scaffolded {result.project_path}")

        agent = CodingAgent(backend, result.project_path, blueprint)
        agent.subscribe(_ProgressPrinter())
        await agent.start()
    finally:
        await backend.aclose()
        await llm_client.close_client()
    return agent.state


def cmd_build(args: argparse.Namespace) -> int:
    blueprint = _load_blueprint(args.blueprint)
    backend = _select_backend(args.provider)
    print(f"[ADJUTANT] Building {blueprint.meta.name} with {backend.name} backend")
    state = asyncio.run(_build(blueprint, args.target, backend))

    failed = state.failed_tasks
    done = len(state.completed_tasks) - len(failed)
    print(f"\n[ADJUTANT] Done: {done} generated, {len(failed)} failed")
    return 1 if failed else 0


# ── serve ────────────────────────────────────────────────────────────────


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("adjutant.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="adjutant",
        description="Adjutant -- turn a project blueprint into a working codebase.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    sub = parser.add_subparsers(dest="command", required=True)

    p_plan = sub.add_parser("plan", help="List the files a blueprint will generate.")
    p_plan.add_argument("blueprint", help="Path to a blueprint JSON file.")
    p_plan.set_defaults(func=cmd_plan)

    p_build = sub.add_parser("build", help="Scaffold a blueprint and generate its files.")
    p_build.add_argument("blueprint", help="Path to a blueprint JSON file.")
    p_build.add_argument(
        "--target",
        default=settings.PROJECTS_DIR,
        help="Parent directory for the project (default: %(default)s).",
    )
    p_build.add_argument(
        "--provider",
        choices=["mock"],
        default=None,
        help="Override the saved provider (only 'mock' is supported here).",
    )
    p_build.set_defaults(func=cmd_build)

    p_serve = sub.add_parser("serve", help="Run the HTTP / WebSocket API.")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)
    p_serve.add_argument("--reload", action="store_true")
    p_serve.set_defaults(func=cmd_serve)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(settings.LOG_LEVEL, settings.LOG_FILE)

    try:
        return args.func(args)
    except AdjutantError as exc:
        print(f"\n[ADJUTANT] FAILED: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n[ADJUTANT] Interrupted by user.", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
