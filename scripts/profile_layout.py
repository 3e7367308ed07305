"""
Profiling script for PyLayout performance analysis.

Runs each layout algorithm over random graphs of increasing size and
prints the hottest functions.
"""

import argparse
import cProfile
import io
import logging
import pstats
from pstats import SortKey
import time

import numpy as np

from pylayout import (
    Graph,
    arf_layout,
    forceatlas2_layout,
    fruchterman_reingold_layout,
    kamada_kawai_layout,
)


def create_graph(n_nodes, n_edges):
    """Create a random graph with n nodes and approximately n_edges edges."""
    edges = []
    np.random.seed(42)
    for _ in range(n_edges):
        source = int(np.random.randint(0, n_nodes))
        target = int(np.random.randint(0, n_nodes))
        if source != target:
            edges.append((source, target))

    return Graph(range(n_nodes), edges)


SIZES = [
    ("small", 20, 30),
    ("medium", 100, 200),
    ("large", 300, 600),
]

LAYOUTS = {
    "fruchterman_reingold": lambda G: fruchterman_reingold_layout(G, seed=1),
    "forceatlas2": lambda G: forceatlas2_layout(G, seed=1),
    "arf": lambda G: arf_layout(G, seed=1, max_iter=200),
    "kamada_kawai": kamada_kawai_layout,
}


def benchmark_scenario(name, func, G, top):
    """Benchmark a scenario and print timing."""
    print(f"\n{'='*60}")
    print(f"Profiling: {name}")
    print('='*60)

    profiler = cProfile.Profile()

    start_time = time.time()
    profiler.enable()
    func(G)
    profiler.disable()
    elapsed = time.time() - start_time

    print(f"\nTotal time: {elapsed:.3f}s")

    s = io.StringIO()
    ps = pstats.Stats(profiler, stream=s).sort_stats(SortKey.CUMULATIVE)
    ps.print_stats(top)

    print(f"\nTop {top} functions by cumulative time:")
    print(s.getvalue())

    return profiler


def main():
    """Run all profiling scenarios."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--layout", choices=sorted(LAYOUTS), action="append",
                        help="layout to profile (default: all)")
    parser.add_argument("--size", choices=[s[0] for s in SIZES], action="append",
                        help="graph size to profile (default: all)")
    parser.add_argument("--top", type=int, default=20, help="number of functions to show")
    parser.add_argument("--save", action="store_true", help="dump .prof files")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    print("PyLayout Performance Profiling")
    print("=" * 60)

    profilers = {}
    for size, n_nodes, n_edges in SIZES:
        if args.size and size not in args.size:
            continue
        G = create_graph(n_nodes, n_edges)
        for layout_name in sorted(LAYOUTS):
            if args.layout and layout_name not in args.layout:
                continue
            name = f"{layout_name} {size} ({n_nodes} nodes, {n_edges} edges)"
            profilers[f"{layout_name}_{size}"] = benchmark_scenario(
                name, LAYOUTS[layout_name], G, args.top
            )

    if args.save:
        for key, profiler in profilers.items():
            filename = f"profile_{key}.prof"
            profiler.dump_stats(filename)
            print(f"Saved: {filename}")

        print("\nTo view detailed profile, use:")
        print("  python -m pstats <profile_file>")


if __name__ == "__main__":
    main()
