"""
Unit tests for logging helpers.
"""

import logging
from io import StringIO

import numpy as np

from manifoldopt.core.config import config_context
from manifoldopt.core.logging import SolverRunLogger, get_logger


class TestGetLogger:
    def test_prefix(self):
        assert get_logger("custom").name == "manifoldopt.custom"
        assert get_logger("manifoldopt.other").name == "manifoldopt.other"

    def test_cached(self):
        assert get_logger("cached") is get_logger("cached")

    def test_configured_once(self):
        logger = get_logger("handlers")
        assert len(logger.handlers) == 1
        assert logger.propagate is False
        get_logger("handlers")
        assert len(logger.handlers) == 1

    def test_level_from_config(self):
        with config_context(log_level="DEBUG"):
            logger = get_logger("debug_level")
        assert logger.level == logging.DEBUG


class TestSolverRunLogger:
    def _capture(self, run_logger):
        stream = StringIO()
        handler = logging.StreamHandler(stream)
        run_logger.logger.addHandler(handler)
        run_logger.logger.setLevel(logging.INFO)
        return stream, handler

    def test_metrics(self):
        run_logger = SolverRunLogger("DemoSolver")
        stream, handler = self._capture(run_logger)
        try:
            with run_logger:
                run_logger.add_metric("Best cost", 0.5)
        finally:
            run_logger.logger.removeHandler(handler)
            run_logger.logger.setLevel(logging.WARNING)
        output = stream.getvalue()
        assert "DemoSolver stopped after" in output
        assert "Best cost: 0.5" in output

    def test_log_state(self):
        from manifoldopt import Euclidean, particle_swarm
        from manifoldopt.plans import StopAfterIteration

        state = particle_swarm(Euclidean(1), lambda M, p: float(p[0] ** 2), swarm_size=3,
                               rng=0, stopping_criterion=StopAfterIteration(2),
                               return_state=True)
        run_logger = SolverRunLogger("DemoSolver")
        run_logger.log_state(state)
        assert run_logger.metrics["Iterations"] == 2
        assert run_logger.metrics["Converged"] is False
        assert run_logger.metrics["Stop reason"].startswith("The algorithm reached")
        assert np.isfinite(state.p[0])
