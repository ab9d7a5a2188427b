"""Build number composition."""

from gitbuildnumber.compose.composer import BuildNumberComposer, abbreviate, default_build_number
from gitbuildnumber.compose.evaluators import (
    BaseExpressionEvaluator,
    DisabledExpressionEvaluator,
    JinjaExpressionEvaluator,
    NodeExpressionEvaluator,
    create_evaluator,
)
from gitbuildnumber.compose.warmup import EvaluatorWarmup

__all__ = [
    "BuildNumberComposer",
    "abbreviate",
    "default_build_number",
    "BaseExpressionEvaluator",
    "DisabledExpressionEvaluator",
    "JinjaExpressionEvaluator",
    "NodeExpressionEvaluator",
    "create_evaluator",
    "EvaluatorWarmup",
]
