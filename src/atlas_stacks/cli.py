"""
CLI do Atlas Stacks.

Comandos:
    list [--changed] [--baseline REF]   stacks do projeto (ou só os alterados)
    run-env STACK                       variáveis de run env do stack

Contrato de saída:
    - sucesso: uma linha por item em stdout, exit 0
    - erro: `error: <tipo>: <mensagem>` (+ `hint: ...`) em stderr, exit 1
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from atlas_stacks.core.changes.detector import list_changed_stacks
from atlas_stacks.core.context import OperationContext
from atlas_stacks.core.exceptions import StacksException
from atlas_stacks.core.project import Project, normalize
from atlas_stacks.core.run.env import load_env
from atlas_stacks.core.stack.stack import list_stacks, load_stack


EXIT_OK = 0
EXIT_ERROR = 1


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="atlas-stacks")
    p.add_argument("-C", "--chdir", default=".", help="project directory (default: cwd)")
    p.add_argument("--log-events", action="store_true", help="dump structured events as JSON lines on stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    list_p = sub.add_parser("list", help="list stacks")
    list_p.add_argument("--changed", action="store_true", help="only stacks changed since the baseline")
    list_p.add_argument("--baseline", default=None, help="git ref to compare against")

    env_p = sub.add_parser("run-env", help="print the run environment of a stack")
    env_p.add_argument("stack", help="stack path, relative to the project root")

    return p


def _cmd_list(project: Project, args: argparse.Namespace, ctx: OperationContext) -> List[str]:
    if args.changed:
        stacks = list_changed_stacks(project, args.baseline, ctx=ctx)
    else:
        stacks = list_stacks(project.root, ctx=ctx)
    return [s.path for s in stacks]


def _cmd_run_env(project: Project, args: argparse.Namespace, ctx: OperationContext) -> List[str]:
    ppath = normalize("/" + args.stack)
    stack = load_stack(project.root, ppath)
    if stack is None:
        raise StacksException(
            message=f"{ppath} is not a stack",
            details={"path": ppath},
            hint="run `atlas-stacks list` to see the available stacks",
        )
    return load_env(project.root, stack, ctx=ctx)


_COMMANDS = {
    "list": _cmd_list,
    "run-env": _cmd_run_env,
}


def _dump_events(ctx: OperationContext) -> None:
    for event in ctx.events:
        sys.stderr.write(json.dumps(event, sort_keys=True, default=str) + "\n")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    ctx = OperationContext.new(action=f"cli.{args.cmd}")
    try:
        project = Project.discover(Path(args.chdir))
        ctx = ctx.bind(root=str(project.root))
        lines = _COMMANDS[args.cmd](project, args, ctx)
    except StacksException as e:
        ctx.log(level="error", message=str(e), kind=e.kind)
        if args.log_events:
            _dump_events(ctx)
        sys.stderr.write(f"error: {e.to_payload().render()}\n")
        return EXIT_ERROR

    if args.log_events:
        _dump_events(ctx)
    for line in lines:
        sys.stdout.write(line + "\n")
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
