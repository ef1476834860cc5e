"""Plans: objectives, problems, states, stopping criteria and decorators."""

from .objective import (
    Evaluation,
    ManifoldObjective,
    ManifoldCostObjective,
    ManifoldGradientObjective,
    ManifoldCostGradientObjective,
    ManifoldHessianObjective,
    ManifoldSubgradientObjective,
    ManifoldProximalMapObjective,
    as_objective,
)
from .counting import ManifoldCountObjective, get_count, reset_counters
from .problem import (
    Problem,
    get_cost,
    get_gradient,
    get_cost_and_gradient,
    get_hessian,
    get_subgradient,
    get_proximal_map,
)
from .state import SolverState, SolverStatus, StateDecorator, get_state, is_state_decorator
from .stopping import (
    StoppingCriterion,
    StopAfterIteration,
    StopAfter,
    StopWhenChangeLess,
    StopWhenEntryChangeLess,
    StopWhenGradientNormLess,
    StopWhenCostLess,
    StopWhenAll,
    StopWhenAny,
    get_active_stopping_criteria,
)
from .debug import (
    DebugAction,
    DebugGroup,
    DebugEvery,
    DebugDivider,
    DebugIteration,
    DebugCost,
    DebugIterate,
    DebugChange,
    DebugGradientNorm,
    DebugEntry,
    DebugEntryChange,
    DebugTime,
    DebugStoppingCriterion,
    DebugWarnIfCostIncreases,
    DebugProgressBar,
    DebugSolverState,
    debug_factory,
)
from .record import (
    RecordAction,
    RecordIteration,
    RecordCost,
    RecordIterate,
    RecordChange,
    RecordGradientNorm,
    RecordEntry,
    RecordEntryChange,
    RecordTime,
    RecordStoppingReason,
    RecordGroup,
    RecordEvery,
    RecordSolverState,
    record_factory,
    get_record,
    has_record,
)
from .stepsize import Stepsize, ConstantStepsize, ArmijoLinesearch, get_last_stepsize
