# Copyright 2019 The TensorNetwork Authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Exhaustive search for the contraction tree with the fewest multiplications.

The search is a dynamic program over subsets of factors, encoded as bitmasks
and processed by increasing size. Every subset keeps the cheapest way found
of reducing it to a single tensor. Every split of a subset into two nonempty
parts is tried, outer products included, and any partial result more
expensive than a cost cap is dropped. The cap starts at the size of the
largest factor and grows until the whole network is reached; it never
exceeds the cost of the left-to-right tree, which is always a valid
answer. See Pfeifer, Haegeman and Verstraete, Phys. Rev. E 90, 033315
(2014) for the idea.

Networks with up to roughly 30 factors are practical; the running time grows
exponentially with the number of factors.
"""

import logging
from typing import (Any, Dict, FrozenSet, Hashable, List, Optional, Sequence,
                    Tuple)
from tensorplan.contractors import tree as tree_lib
from tensorplan.cost_model import CostModel, Poly
from tensorplan.network import ContractionNetwork

_logger = logging.getLogger(__name__)

# mask -> (cost, open labels, (left mask, right mask) or None)
_Table = Dict[int, Tuple[Any, FrozenSet[Hashable], Optional[Tuple[int, int]]]]


def _plain(cost: Poly, symbol: Optional[str]) -> Any:
  """Use built-in numbers for the search when no scaling variable is used."""
  if symbol is None:
    return cost.coeffs.get(0, 0)
  return cost


def _lowest_bit(mask: int) -> int:
  return (mask & -mask).bit_length() - 1


def _search(labels: Sequence[FrozenSet[Hashable]], label_cost: Dict[Hashable,
                                                                    Any],
            cap: Any) -> Optional[List[_Table]]:
  """Run the capped dynamic program over `len(labels)` operands.

  Returns:
    The tables of all subsets by size, or `None` if the full set could not
    be reached without exceeding `cap`.
  """
  num = len(labels)
  size_cache = {}

  def size(label_set):
    if label_set not in size_cache:
      result = 1
      for label in label_set:
        result = result * label_cost[label]
      size_cache[label_set] = result
    return size_cache[label_set]

  tables = [{}, {1 << i: (0, labels[i], None) for i in range(num)}]
  for k in range(2, num + 1):
    current = {}
    for k1 in range(1, k // 2 + 1):
      k2 = k - k1
      for s1, (c1, f1, _) in tables[k1].items():
        for s2, (c2, f2, _) in tables[k2].items():
          if s1 & s2:
            continue
          if k1 == k2 and s1 > s2:
            continue
          shared = f1 & f2
          partial = c1 + c2
          if partial > cap:
            continue
          s = s1 | s2
          best = current.get(s)
          if best is not None and not partial < best[0]:
            continue
          cost = partial + size(f1 | f2)
          if cost > cap:
            continue
          if best is not None and not cost < best[0]:
            continue
          current[s] = (cost, (f1 | f2) - shared, (s1, s2))
    tables.append(current)
  if (1 << num) - 1 not in tables[num]:
    return None
  return tables


def _reconstruct(tables: List[_Table], mask: int,
                 positions: Sequence[int]) -> tree_lib.Nested:
  _, _, split = tables[bin(mask).count("1")][mask]
  if split is None:
    return positions[_lowest_bit(mask)]
  s1, s2 = split
  if _lowest_bit(s2) < _lowest_bit(s1):
    s1, s2 = s2, s1
  return (_reconstruct(tables, s1, positions),
          _reconstruct(tables, s2, positions))


def _optimize(network: ContractionNetwork, cost_model: CostModel,
              report: Any) -> tree_lib.ContractionTree:
  positions = list(range(len(network)))
  leaves = [tree_lib.leaf(network, n) for n in positions]
  fallback = leaves[0]
  for node in leaves[1:]:
    fallback = tree_lib.join(fallback, node, cost_model)
  if len(positions) < 3:
    return fallback

  symbol = cost_model.symbol
  labels = [frozenset(node.labels) for node in leaves]
  label_cost = {
      label: _plain(cost_model.cost_of(label), symbol)
      for label_set in labels for label in label_set
  }
  bound = _plain(fallback.cost, symbol)
  cap = 0
  for label_set in labels:
    factor_size = 1
    for label in label_set:
      factor_size = factor_size * label_cost[label]
    cap = max(cap, factor_size)
  growth = max(list(label_cost.values()) + [2])
  cap = min(cap, bound)
  while True:
    report("searching %d factors with cost cap %s", len(positions), cap)
    tables = _search(labels, label_cost, cap)
    if tables is not None:
      nested = _reconstruct(tables, (1 << len(positions)) - 1, positions)
      result = tree_lib.build_subtree(nested, network, cost_model)
      if fallback.cost < result.cost:
        return fallback
      return result
    if not cap < bound:
      report("no tree found below the left-to-right cost %s", bound)
      return fallback
    grown = min(cap * growth, bound)
    cap = grown if cap < grown else bound


def optimal_tree(network: ContractionNetwork,
                 cost_model: Optional[CostModel] = None,
                 verbose: bool = False,
                 logger: Optional[logging.Logger] = None
                ) -> Tuple[tree_lib.ContractionTree, Poly]:
  """Find the contraction tree minimizing the total multiplication cost.

  The cost of a pairwise contraction is the product of the costs of all
  labels of both operands; the cost of a tree is the sum over its internal
  nodes. Traces within a single factor are not counted. Among trees of
  equal cost the one found first in a fixed enumeration order is returned,
  so results are reproducible.

  Args:
    network: The network.
    cost_model: The label costs. Defaults to `CostModel.uniform()`.
    verbose: If `True`, report progress at INFO level instead of DEBUG.
    logger: The logger receiving progress messages.
  Returns:
    The root of the optimal tree and its cost.
  Raises:
    IncomparableCost: If the label costs use different scaling variables.
  """
  if len(network) == 0:
    raise ValueError("cannot build a contraction tree without factors")
  if cost_model is None:
    cost_model = CostModel.uniform()
  log = logger if logger is not None else _logger
  report = log.info if verbose else log.debug

  components = network.connected_components()
  report("optimizing %d factors in %d connected component(s)", len(network),
         len(components))
  result = _optimize(network, cost_model, report)
  report("optimal contraction tree %s with cost %s", result.to_nested(),
         result.cost)
  return result, result.cost
