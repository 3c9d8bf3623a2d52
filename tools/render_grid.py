#!/usr/bin/env python3
# Render generated levels to PNGs using Pillow.
# One PNG per seed; --solved shows the captured solution pose with its flow.

import argparse, datetime, logging, os
from flowstate.engine.flow import calculate_flow
from flowstate.mapgen.generator import build_level
from flowstate.render.tileset import save_png

def render_seed(seed, out_png, tile_size=32, solved=False):
    level = build_level(seed)
    grid = level.grid
    if solved:
        grid = calculate_flow(level.solution.apply(grid))
    save_png(grid, out_png, tile_size=tile_size)

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--seed", type=str, help="Single seed to render")
    ap.add_argument("--start", type=str, help="First date of a range, YYYY-MM-DD")
    ap.add_argument("--days", type=int, default=7, help="Days to render with --start")
    ap.add_argument("--outdir", type=str, default="out/png", help="Where to write PNGs")
    ap.add_argument("--tile", type=int, default=32, help="Tile size in pixels")
    ap.add_argument("--solved", action="store_true", help="Render the solution pose")
    ap.add_argument("-log", "--loglevel", default="warning")
    args = ap.parse_args()
    logging.basicConfig(level=args.loglevel.upper())

    if args.seed:
        seeds = [args.seed]
    elif args.start:
        day = datetime.date.fromisoformat(args.start)
        seeds = [(day + datetime.timedelta(days=i)).isoformat() for i in range(args.days)]
    else:
        ap.error("give --seed or --start")
    for seed in seeds:
        render_seed(seed, os.path.join(args.outdir, f"{seed}.png"), tile_size=args.tile, solved=args.solved)
    print(f"Wrote {len(seeds)} PNGs to {args.outdir}")

if __name__ == "__main__":
    main()
