"""
Benchmark harness for evaluating and comparing layout algorithms.
Collects drawing quality metrics and runtime for every algorithm and case.
"""
from typing import Any, Dict, List, Optional
import logging
import time
from dataclasses import dataclass, field

from ..engine import Algorithm, layout, make_request
from ..impl import codec
from ..impl.distance import DistanceTable
from ..metrics import layout_quality
from .test_cases import BenchmarkCase, BENCHMARK_CASES

logger = logging.getLogger(__name__)


@dataclass
class BenchmarkResult:
    """Results from a single layout run."""
    case_name: str
    algorithm: str
    run: int
    runtime_seconds: float
    vertex_count: int
    edge_count: int
    diameter: Optional[float]
    stress: float
    crossings: int
    edge_length_mean: float
    edge_length_cv: float
    min_separation: float
    warnings: List[str] = field(default_factory=list)


class BenchmarkRunner:
    def __init__(self, cases: List[BenchmarkCase] = None):
        """Initialize with optional specific test cases."""
        self.cases = cases or BENCHMARK_CASES

    def run_benchmark(self,
                      algorithms: List[Algorithm] = None,
                      runs_per_case: int = 3,
                      iterations: int = 100,
                      seed: Optional[int] = None) -> List[BenchmarkResult]:
        """Run full benchmark suite.

        Args:
            algorithms: Algorithms to compare, all of them by default
            runs_per_case: Number of runs per case and algorithm
            iterations: Iteration count passed to iterative algorithms
            seed: Base seed; run ``r`` uses ``seed + r`` so runs differ but repeat

        Returns:
            List of BenchmarkResults for all runs
        """
        results = []
        algorithms = algorithms or list(Algorithm)

        for case in self.cases:
            logger.info(f"Running benchmark case: {case.name}")
            graph = codec.parse(case.graph_text)
            table = DistanceTable.build(graph)

            for algorithm in algorithms:
                logger.info(f"Testing algorithm: {algorithm.value}")
                for run in range(runs_per_case):
                    run_seed = None if seed is None else seed + run
                    try:
                        results.append(
                            self._run_single_case(case, algorithm, table, run, iterations, run_seed)
                        )
                    except Exception:
                        logger.exception(f"Error in {case.name} with {algorithm.value}")
                        continue

        return results

    def _run_single_case(self,
                         case: BenchmarkCase,
                         algorithm: Algorithm,
                         table: DistanceTable,
                         run: int,
                         iterations: int,
                         seed: Optional[int]) -> BenchmarkResult:
        """Run single benchmark case with one algorithm."""
        request = make_request(
            algorithm=algorithm, graph=case.graph_text, iterations=iterations, seed=seed
        )
        start_time = time.time()
        response = layout(request)
        runtime = time.time() - start_time

        positions, edges = codec.parse_rendered(response.graph)
        quality: Dict[str, Any] = layout_quality(positions, edges, table)

        return BenchmarkResult(
            case_name=case.name,
            algorithm=algorithm.value,
            run=run,
            runtime_seconds=runtime,
            vertex_count=response.vertex_count,
            edge_count=response.edge_count,
            diameter=table.diameter(),
            stress=quality['stress'],
            crossings=quality['crossings'],
            edge_length_mean=quality['edge_length_mean'],
            edge_length_cv=quality['edge_length_cv'],
            min_separation=quality['min_separation'],
            warnings=response.warnings,
        )
