from __future__ import annotations

from .pruner import Pruner
from .prunerconfig import PrunerConfig
from .prunerevaluator import TreeEvaluator
from .tmppruner import TmpPruner

__all__ = [
    "Pruner",
    "PrunerConfig",
    "TmpPruner",
    "TreeEvaluator",
]
