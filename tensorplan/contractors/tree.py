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
"""Binary contraction trees over the factors of a network."""

from typing import Any, FrozenSet, Hashable, Iterator, Optional, Tuple, Union
from tensorplan.cost_model import CostModel, Poly
from tensorplan.network import ContractionNetwork

Nested = Union[int, Tuple[Any, Any]]


class ContractionTree:
  """Base class of `Leaf` and `Internal`.

  Every node knows the labels of the tensor it evaluates to, in the order
  in which the compiler lays out that tensor, and the accumulated cost of
  evaluating it.
  """
  labels = ()  # type: Tuple[Hashable, ...]
  cost = Poly()  # type: Poly

  @property
  def is_leaf(self) -> bool:
    raise NotImplementedError()

  def leaves(self) -> Iterator[int]:
    raise NotImplementedError()

  def internal_nodes(self) -> Iterator["Internal"]:
    """All internal nodes in post-order."""
    raise NotImplementedError()

  def to_nested(self) -> Nested:
    """The tree shape as nested pairs of factor positions."""
    raise NotImplementedError()

  @property
  def num_leaves(self) -> int:
    return sum(1 for _ in self.leaves())

  @property
  def num_internal(self) -> int:
    return sum(1 for _ in self.internal_nodes())

  def __eq__(self, other: Any) -> bool:
    if not isinstance(other, ContractionTree):
      return NotImplemented
    return (self.to_nested() == other.to_nested() and
            self.labels == other.labels and self.cost == other.cost)

  def __hash__(self) -> int:
    return hash((self.to_nested(), self.labels))


class Leaf(ContractionTree):
  """An input factor, after tracing out its repeated labels."""

  def __init__(self, index: int, labels: Tuple[Hashable, ...]) -> None:
    self.index = index
    self.labels = tuple(labels)
    self.cost = Poly()

  @property
  def is_leaf(self) -> bool:
    return True

  def leaves(self) -> Iterator[int]:
    yield self.index

  def internal_nodes(self) -> Iterator["Internal"]:
    return iter(())

  def to_nested(self) -> Nested:
    return self.index

  def __repr__(self) -> str:
    return "Leaf({})".format(self.index)


class Internal(ContractionTree):
  """The pairwise contraction of two subtrees."""

  def __init__(self, left: ContractionTree, right: ContractionTree,
               contracted: FrozenSet[Hashable], labels: Tuple[Hashable, ...],
               cost: Poly) -> None:
    self.left = left
    self.right = right
    self.contracted = frozenset(contracted)
    self.labels = tuple(labels)
    self.cost = cost

  @property
  def is_leaf(self) -> bool:
    return False

  def leaves(self) -> Iterator[int]:
    yield from self.left.leaves()
    yield from self.right.leaves()

  def internal_nodes(self) -> Iterator["Internal"]:
    yield from self.left.internal_nodes()
    yield from self.right.internal_nodes()
    yield self

  def to_nested(self) -> Nested:
    return (self.left.to_nested(), self.right.to_nested())

  def __repr__(self) -> str:
    return "Internal({!r}, {!r}, cost={})".format(self.left, self.right,
                                                  self.cost)


def pairwise_cost(labels1: Tuple[Hashable, ...], labels2: Tuple[Hashable, ...],
                  cost_model: CostModel) -> Poly:
  """Number of multiplications for contracting two tensors.

  This is the product of the costs of every label on either tensor; shared
  labels are counted once.
  """
  cost = Poly.constant(1)
  for label in set(labels1) | set(labels2):
    cost = cost * cost_model.cost_of(label)
  return cost


def leaf(network: ContractionNetwork, index: int) -> Leaf:
  return Leaf(index, network.factors[index].open_labels)


def join(left: ContractionTree,
         right: ContractionTree,
         cost_model: Optional[CostModel] = None) -> Internal:
  """Contract two subtrees over all labels they share."""
  if cost_model is None:
    cost_model = CostModel.uniform()
  contracted = set(left.labels) & set(right.labels)
  labels = tuple(l for l in left.labels if l not in contracted) + tuple(
      l for l in right.labels if l not in contracted)
  cost = left.cost + right.cost + pairwise_cost(left.labels, right.labels,
                                                cost_model)
  return Internal(left, right, frozenset(contracted), labels, cost)


def build_subtree(nested: Nested,
                  network: ContractionNetwork,
                  cost_model: Optional[CostModel] = None) -> ContractionTree:
  """Build an annotated tree over some of the factors of `network`."""
  if isinstance(nested, (tuple, list)):
    if len(nested) != 2:
      raise ValueError(
          "contraction trees are binary, found a node {}".format(nested))
    return join(
        build_subtree(nested[0], network, cost_model),
        build_subtree(nested[1], network, cost_model), cost_model)
  if not 0 <= nested < len(network):
    raise ValueError("tree refers to factor {} of a network with {} "
                     "factors".format(nested, len(network)))
  return leaf(network, nested)


def build_tree(nested: Nested,
               network: ContractionNetwork,
               cost_model: Optional[CostModel] = None) -> ContractionTree:
  """Build an annotated tree from nested pairs of factor positions.

  Raises:
    ValueError: If the leaves are not a permutation of the factor positions.
  """
  tree = build_subtree(nested, network, cost_model)
  if sorted(tree.leaves()) != list(range(len(network))):
    raise ValueError("tree {} does not cover every factor exactly "
                     "once".format(nested))
  return tree


def left_to_right_tree(network: ContractionNetwork,
                       cost_model: Optional[CostModel] = None
                      ) -> ContractionTree:
  """The tree of contracting the factors strictly left to right."""
  if len(network) == 0:
    raise ValueError("cannot build a contraction tree without factors")
  tree = leaf(network, 0)
  for n in range(1, len(network)):
    tree = join(tree, leaf(network, n), cost_model)
  return tree
