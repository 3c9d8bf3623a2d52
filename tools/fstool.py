#!/usr/bin/env python3
import argparse, csv, datetime, json, logging, os
from flowstate.engine.flow import calculate_flow
from flowstate.engine.hints import SolutionStore
from flowstate.engine.state import GameState
from flowstate.engine.win import check_win_condition
from flowstate.grid import GLYPHS
from flowstate.mapgen.generator import build_level
from flowstate.tiles import NodeStatus

FLOW_MARK = {0: " ", 1: "c", 2: "m", 3: "w"}

def cells(grid):
    return [[f"{GLYPHS[t.type]}{t.rotation}" for t in row] for row in grid.rows()]

def write_tsv(grid, path, include_header=False):
    with open(path, 'w', newline='') as f:
        w = csv.writer(f, delimiter='\t')
        if include_header:
            w.writerow(list(range(grid.size)))
        for r in cells(grid):
            w.writerow(r)

def write_json(grid, path):
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(grid.to_records(), f, indent=1)

def cmd_emit(args):
    grid = build_level(args.seed).grid
    if args.json:
        write_json(grid, args.out)
    else:
        write_tsv(grid, args.out, include_header=args.header)
    print(f"Wrote {args.out}")

def cmd_golden(args):
    os.makedirs(args.outdir, exist_ok=True)
    day = datetime.date.fromisoformat(args.start)
    fallbacks = 0
    for _ in range(args.days):
        seed = day.isoformat()
        level = build_level(seed)
        fallbacks += level.fallback
        write_tsv(level.grid, os.path.join(args.outdir, f"{seed}.tsv"))
        day += datetime.timedelta(days=1)
    print(f"Wrote {args.days} levels to {args.outdir} ({fallbacks} fallback)")

def cmd_show(args):
    level = build_level(args.seed)
    grid = level.grid
    if args.solved:
        grid = calculate_flow(level.solution.apply(grid))
    for row in grid.rows():
        print(" ".join(f"{GLYPHS[t.type]}{t.rotation}{FLOW_MARK[t.flow_color]}" for t in row))
    print(f"attempts={level.attempts} fallback={level.fallback} won={check_win_condition(grid)}")

def cmd_solve(args):
    state = GameState(args.seed, store=SolutionStore())
    for _ in range(args.max_steps):
        if state.is_won:
            break
        hint = state.hint()
        if hint is not None:
            state.apply_hint(hint)
            continue
        # every tile is posed; only a bug on the route can still block the win
        bugs = [p for p in state.grid.positions()
                if state.grid.at(p).status == NodeStatus.FORBIDDEN and state.grid.at(p).has_flow]
        if not bugs or not state.zap(bugs[0]):
            break
    print(f"{args.seed}: won={state.is_won} moves={state.moves}")
    if not state.is_won:
        raise SystemExit(1)

def main():
    p = argparse.ArgumentParser()
    p.add_argument('-log', '--loglevel', default='warning',
                   help='Provide logging level. Example --loglevel debug, default=warning')
    sub = p.add_subparsers(dest='cmd', required=True)
    p1 = sub.add_parser('emit')
    p1.add_argument('--seed', type=str, required=True)
    p1.add_argument('--out', type=str, required=True)
    p1.add_argument('--header', action='store_true')
    p1.add_argument('--json', action='store_true')
    p1.set_defaults(func=cmd_emit)
    p2 = sub.add_parser('golden')
    p2.add_argument('--start', type=str, required=True, help='First date, YYYY-MM-DD')
    p2.add_argument('--days', type=int, default=30)
    p2.add_argument('--outdir', type=str, required=True)
    p2.set_defaults(func=cmd_golden)
    p3 = sub.add_parser('show')
    p3.add_argument('--seed', type=str, required=True)
    p3.add_argument('--solved', action='store_true')
    p3.set_defaults(func=cmd_show)
    p4 = sub.add_parser('solve')
    p4.add_argument('--seed', type=str, required=True)
    p4.add_argument('--max-steps', type=int, default=500)
    p4.set_defaults(func=cmd_solve)
    args = p.parse_args()
    logging.basicConfig(level=args.loglevel.upper())
    args.func(args)

if __name__ == '__main__':
    main()
