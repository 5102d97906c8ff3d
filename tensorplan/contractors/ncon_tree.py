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
"""Contraction trees that follow a prescribed order of contracted labels."""

import collections
import warnings
from typing import Hashable, Optional, Sequence
from tensorplan.contractors import tree as tree_lib
from tensorplan.cost_model import CostModel
from tensorplan.errors import MalformedNetwork
from tensorplan.network import ContractionNetwork


def _check_order(network: ContractionNetwork,
                 order: Sequence[Hashable]) -> None:
  counts = collections.Counter(order)
  repeated = [l for l, c in counts.items() if c > 1]
  if repeated:
    raise MalformedNetwork(
        "labels {} appear more than once in `order`".format(repeated),
        label=repeated[0],
        count=counts[repeated[0]])
  allowed = set(network.contracted_labels) | set(network.traced_labels)
  unknown = [l for l in order if l not in allowed]
  if unknown:
    raise MalformedNetwork(
        "labels {} in `order` are not contracted labels of the "
        "network".format(unknown),
        label=unknown[0],
        count=len(network.label_factors.get(unknown[0], ())))
  missing = [l for l in network.contracted_labels if l not in counts]
  if missing:
    raise MalformedNetwork(
        "`order` = {} does not list the contracted labels {}".format(
            list(order), missing),
        label=missing[0],
        count=2)


def order_tree(network: ContractionNetwork,
               order: Sequence[Hashable],
               cost_model: Optional[CostModel] = None
              ) -> tree_lib.ContractionTree:
  """Build the tree that resolves contracted labels in the given order.

  The two operands carrying the next unresolved label in `order` are
  contracted, together with every other label they share. Operands that
  share no label once `order` is exhausted are combined by outer products
  in textual order.

  Args:
    network: The network.
    order: Every label contracted between two factors, exactly once.
      Labels traced within one factor may appear and are skipped.
    cost_model: Used to annotate the tree with costs; defaults to the
      uniform model.
  Returns:
    The root of the tree.
  Raises:
    MalformedNetwork: If `order` is not a valid contraction order.
  """
  if len(network) == 0:
    raise ValueError("cannot build a contraction tree without factors")
  _check_order(network, order)
  nodes = {n: tree_lib.leaf(network, n) for n in range(len(network))}
  # textual position of the leftmost leaf of every live node
  first = {n: n for n in nodes}
  owners = {}
  for n, node in nodes.items():
    for label in node.labels:
      owners.setdefault(label, []).append(n)

  traced = set(network.traced_labels)
  pending = [l for l in order if l not in traced]
  next_id = len(network)
  for i, label in enumerate(pending):
    holders = owners[label]
    if holders[0] == holders[1]:
      # already contracted together with an earlier label
      continue
    a, b = sorted(holders, key=lambda n: first[n])
    new = tree_lib.join(nodes.pop(a), nodes.pop(b), cost_model)
    extra = new.contracted - {label}
    if extra != set(pending[i + 1:i + 1 + len(extra)]):
      warnings.warn("Suboptimal ordering: contracting label {} also "
                    "contracts {} ahead of their turn in `order` = {}".format(
                        label, sorted(extra, key=repr), list(order)))
    nodes[next_id] = new
    first[next_id] = min(first.pop(a), first.pop(b))
    for l in new.labels:
      owners[l] = [next_id if h in (a, b) else h for h in owners[l]]
    for l in new.contracted:
      owners[l] = [next_id, next_id]
    next_id += 1

  remaining = sorted(nodes, key=lambda n: first[n])
  result = nodes[remaining[0]]
  for n in remaining[1:]:
    result = tree_lib.join(result, nodes[n], cost_model)
  return result


def ncon_tree(network: ContractionNetwork,
              cost_model: Optional[CostModel] = None
             ) -> tree_lib.ContractionTree:
  """The NCON contraction tree.

  Factors sharing the smallest positive label are contracted first, then
  the operands sharing the smallest remaining label, and so on. The result
  is fully determined by the labels.

  Raises:
    ValueError: If the network does not follow the NCON convention.
  """
  if not network.is_ncon:
    raise ValueError("network labels do not follow the NCON convention: "
                     "negative integers for free labels and positive "
                     "integers for contracted pairs")
  return order_tree(network, sorted(network.contracted_labels), cost_model)
