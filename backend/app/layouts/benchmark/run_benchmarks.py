"""
Script to run layout benchmarks and generate comparison reports.
"""
import argparse
import logging
from dataclasses import asdict
from pathlib import Path
from typing import List

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from ..engine import Algorithm
from .runner import BenchmarkRunner, BenchmarkResult

logger = logging.getLogger(__name__)


def results_frame(results: List[BenchmarkResult]) -> pd.DataFrame:
    df = pd.DataFrame([asdict(r) for r in results])
    df['warnings'] = df['warnings'].apply(len)
    return df


def summarize(df: pd.DataFrame) -> pd.DataFrame:
    """Mean of every metric per case and algorithm."""
    metrics = ['runtime_seconds', 'stress', 'crossings', 'edge_length_cv', 'min_separation']
    return df.groupby(['case_name', 'algorithm'])[metrics].mean().reset_index()


def plot_results(results: List[BenchmarkResult], output_dir: Path):
    """Generate visualization plots of benchmark results."""
    if not results:
        logger.warning("No results to plot!")
        return

    df = results_frame(results)

    plots_dir = output_dir / 'plots'
    plots_dir.mkdir(exist_ok=True)

    # Runtime comparison
    plt.figure(figsize=(10, 6))
    sns.boxplot(data=df, x='case_name', y='runtime_seconds', hue='algorithm')
    plt.title('Layout Runtime Comparison')
    plt.xticks(rotation=45)
    plt.tight_layout()
    plt.savefig(plots_dir / 'runtime_comparison.png')
    plt.close()

    # Quality metrics
    fig, axes = plt.subplots(2, 2, figsize=(15, 15))
    fig.suptitle('Quality Metrics Comparison')

    panels = [
        ('stress', 'Normalized Stress'),
        ('crossings', 'Edge Crossings'),
        ('edge_length_cv', 'Edge Length Variation'),
        ('min_separation', 'Minimum Vertex Separation'),
    ]
    for ax, (column, title) in zip(axes.flat, panels):
        sns.boxplot(data=df, x='case_name', y=column, hue='algorithm', ax=ax)
        ax.set_title(title)
        ax.tick_params(labelrotation=45)

    plt.tight_layout()
    plt.savefig(plots_dir / 'quality_metrics.png')
    plt.close()

    # Save raw data
    df.to_csv(output_dir / 'benchmark_results.csv', index=False)
    summarize(df).to_csv(output_dir / 'benchmark_summary.csv', index=False)


def main():
    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser(description='Run graph layout benchmarks')
    parser.add_argument('--output', type=str, default='benchmark_results',
                        help='Output directory for results')
    parser.add_argument('--runs', type=int, default=3,
                        help='Number of runs per case')
    parser.add_argument('--iterations', type=int, default=100,
                        help='Iterations for iterative algorithms')
    parser.add_argument('--seed', type=int, default=None,
                        help='Base seed for reproducible runs')
    parser.add_argument('--algorithms', nargs='*', default=None,
                        choices=[a.value for a in Algorithm],
                        help='Algorithms to compare (default: all)')
    args = parser.parse_args()

    output_dir = Path(args.output)
    output_dir.mkdir(exist_ok=True)

    algorithms = [Algorithm(a) for a in args.algorithms] if args.algorithms else None

    runner = BenchmarkRunner()
    results = runner.run_benchmark(
        algorithms=algorithms,
        runs_per_case=args.runs,
        iterations=args.iterations,
        seed=args.seed,
    )

    plot_results(results, output_dir)
    if results:
        print(summarize(results_frame(results)).to_string(index=False))

    logger.info(f"Benchmark results saved to {output_dir}")


if __name__ == '__main__':
    main()
