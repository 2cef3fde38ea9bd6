# vectordb_sdk/ranker.py
# SPDX-License-Identifier: Apache-2.0
"""
Ranking strategies for hybrid search.

The set is closed: reciprocal-rank fusion and weighted fusion are the only
strategies the server understands. Each strategy renders its parameters as
strings; the exact text is part of the wire contract because the server parses
it as an expression.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

DEFAULT_RRF_K = 60.0


def format_float(value: float) -> str:
    """Shortest text for a float, without a trailing ".0" (1.0 -> "1", 0.5 -> "0.5")."""
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text


class BaseRanker(ABC):
    """Capability contract shared by all ranking strategies."""

    @abstractmethod
    def get_strategy(self) -> str: ...

    @abstractmethod
    def get_params(self) -> Dict[str, str]: ...

    def to_dict(self) -> Dict[str, Any]:
        return {"strategy": self.get_strategy(), "params": self.get_params()}

    def rank_params(self) -> List[Tuple[str, str]]:
        """
        Key/value pairs appended to a hybrid search request.

        `params` is a JSON object whose values are the parameter strings inserted
        verbatim, e.g. {"k":60} or {"weights":[1, 2]}.
        """
        body = ",".join(f'"{key}":{value}' for key, value in self.get_params().items())
        return [("strategy", self.get_strategy()), ("params", "{" + body + "}")]


@dataclass(frozen=True)
class RRFRanker(BaseRanker):
    """Reciprocal rank fusion: score = sum(1 / (k + rank))."""
    k: float = DEFAULT_RRF_K

    def get_strategy(self) -> str:
        return "rrf"

    def get_params(self) -> Dict[str, str]:
        return {"k": format_float(self.k)}


@dataclass(frozen=True)
class WeightedRanker(BaseRanker):
    """Weighted fusion: one weight per sub-search, in request order."""
    weights: Tuple[float, ...] = ()

    def __init__(self, weights: Sequence[float] = ()) -> None:
        object.__setattr__(self, "weights", tuple(float(w) for w in weights))

    def get_strategy(self) -> str:
        return "weighted"

    def get_params(self) -> Dict[str, str]:
        return {"weights": "[" + ", ".join(format_float(w) for w in self.weights) + "]"}


__all__ = [
    "BaseRanker",
    "RRFRanker",
    "WeightedRanker",
    "format_float",
    "DEFAULT_RRF_K",
]
