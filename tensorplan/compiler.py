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
"""Lowering of contraction trees into sequences of primitive calls.

A `CompiledPlan` depends only on the labels of a network, never on the
buffers it is applied to. Compile it once with `plan` and evaluate it any
number of times with `tensorplan.execution.execute`.
"""

import logging
import uuid
from typing import (Any, Hashable, List, NamedTuple, Optional, Sequence, Tuple,
                    Union)
from tensorplan.contractors import tree as tree_lib
from tensorplan.contractors.ncon_tree import ncon_tree, order_tree
from tensorplan.contractors.optimal_tree import optimal_tree
from tensorplan.cost_model import CostModel, Poly
from tensorplan.network import ContractionNetwork, Label, build_network

_logger = logging.getLogger(__name__)

INPUT = "input"
TEMPORARY = "temporary"
OUTPUT = "output"


class Operand(NamedTuple):
  """Where a primitive call reads from or writes to.

  `index` is the factor position for inputs, the temporary index for
  temporaries and 0 for the output.
  """
  kind: str
  index: int


class AddCall(NamedTuple):
  alpha: Any
  src: Operand
  conj: bool
  beta: Any
  dst: Operand
  perm: Tuple[int, ...]
  src_labels: Tuple[Label, ...]
  dst_labels: Tuple[Label, ...]


class TraceCall(NamedTuple):
  alpha: Any
  src: Operand
  conj: bool
  beta: Any
  dst: Operand
  perm: Tuple[int, ...]
  cind1: Tuple[int, ...]
  cind2: Tuple[int, ...]
  src_labels: Tuple[Label, ...]
  dst_labels: Tuple[Label, ...]


class ContractCall(NamedTuple):
  alpha: Any
  a: Operand
  conj_a: bool
  b: Operand
  conj_b: bool
  beta: Any
  dst: Operand
  cind_a: Tuple[int, ...]
  cind_b: Tuple[int, ...]
  perm: Tuple[int, ...]
  labels_a: Tuple[Label, ...]
  labels_b: Tuple[Label, ...]
  dst_labels: Tuple[Label, ...]


Call = Union[AddCall, TraceCall, ContractCall]


class Temporary(NamedTuple):
  index: int
  labels: Tuple[Label, ...]


class CompiledPlan:
  """An ordered list of primitive calls evaluating a network.

  The last call always writes the output and carries the scalars `alpha`
  and `beta`. Every other call writes a temporary, which is consumed by
  exactly one later call.

  Attributes:
    network: The network the plan evaluates.
    tree: The contraction tree the plan was compiled from.
    instructions: The primitive calls, in execution order.
    temporaries: The intermediate results, indexed by `Operand.index`.
    key: Identifies the plan in cache keys of its temporaries.
    alpha: Default scale of the result.
    beta: Default scale of the previous content of a given output buffer.
  """

  def __init__(self, network: ContractionNetwork,
               tree: tree_lib.ContractionTree, instructions: Sequence[Call],
               temporaries: Sequence[Temporary], key: Hashable, alpha: Any,
               beta: Any) -> None:
    self.network = network
    self.tree = tree
    self.instructions = tuple(instructions)
    self.temporaries = tuple(temporaries)
    self.key = key
    self.alpha = alpha
    self.beta = beta

  @property
  def cost(self) -> Poly:
    return self.tree.cost

  @property
  def output(self) -> Tuple[Label, ...]:
    return self.network.output

  def __len__(self) -> int:
    return len(self.instructions)

  def __repr__(self) -> str:
    return ("CompiledPlan(tree={}, calls={}, temporaries={}, cost={})".format(
        self.tree.to_nested(), len(self.instructions), len(self.temporaries),
        self.cost))


def _second_occurrence(labels: Tuple[Label, ...], label: Label) -> int:
  return len(labels) - 1 - labels[::-1].index(label)


def compile_tree(network: ContractionNetwork,
                 tree: tree_lib.ContractionTree,
                 alpha: Any = 1,
                 beta: Any = 0) -> Tuple[List[Call], List[Temporary]]:
  """Lower `tree` into primitive calls.

  The tree is walked in post-order. A factor with repeated labels is
  traced into a temporary before it enters a contraction; every internal
  node becomes one `contract` call. A network with a single factor is
  evaluated by one `trace` or `add` call. Conjugation flags are applied by
  the call reading the factor, so temporaries are never conjugated.

  Returns:
    The calls and the temporaries they write.
  """
  instructions = []
  temporaries = []
  output = network.output

  def destination(labels, is_root):
    if is_root:
      perm = tuple(labels.index(l) for l in output)
      return Operand(OUTPUT, 0), perm, tuple(output), alpha, beta
    temp = Temporary(len(temporaries), tuple(labels))
    temporaries.append(temp)
    return (Operand(TEMPORARY, temp.index), tuple(range(len(labels))),
            temp.labels, 1, 0)

  def visit_leaf(node, is_root):
    factor = network.factors[node.index]
    src = Operand(INPUT, node.index)
    if not factor.traced_labels and not is_root:
      return src, factor.labels, factor.conj
    dst, _, dst_labels, a, b = destination(node.labels, is_root)
    perm = tuple(factor.labels.index(l) for l in dst_labels)
    if factor.traced_labels:
      cind1 = tuple(factor.labels.index(l) for l in factor.traced_labels)
      cind2 = tuple(
          _second_occurrence(factor.labels, l) for l in factor.traced_labels)
      instructions.append(
          TraceCall(a, src, factor.conj, b, dst, perm, cind1, cind2,
                    factor.labels, dst_labels))
    else:
      instructions.append(
          AddCall(a, src, factor.conj, b, dst, perm, factor.labels,
                  dst_labels))
    return dst, dst_labels, False

  def visit(node, is_root):
    if node.is_leaf:
      return visit_leaf(node, is_root)
    op_a, labels_a, conj_a = visit(node.left, False)
    op_b, labels_b, conj_b = visit(node.right, False)
    contracted = [l for l in labels_a if l in node.contracted]
    cind_a = tuple(labels_a.index(l) for l in contracted)
    cind_b = tuple(labels_b.index(l) for l in contracted)
    dst, perm, dst_labels, a, b = destination(node.labels, is_root)
    instructions.append(
        ContractCall(a, op_a, conj_a, op_b, conj_b, b, dst, cind_a, cind_b,
                     perm, tuple(labels_a), tuple(labels_b), dst_labels))
    return dst, dst_labels, False

  visit(tree, True)
  return instructions, temporaries


def _as_network(network: Union[ContractionNetwork, Sequence[Sequence[Label]]],
                conjlist: Optional[Sequence[bool]],
                output: Optional[Sequence[Label]]) -> ContractionNetwork:
  if isinstance(network, ContractionNetwork):
    if conjlist is not None or output is not None:
      raise ValueError("`conjlist` and `output` can only be given together "
                       "with a network structure, not a ContractionNetwork")
    return network
  return build_network(network, conjlist=conjlist, output=output)


def choose_tree(network: ContractionNetwork,
                cost_model: Optional[CostModel] = None,
                order: Optional[Sequence[Label]] = None,
                tree: Optional[Union[tree_lib.Nested,
                                     tree_lib.ContractionTree]] = None,
                verbose: bool = False,
                logger: Optional[logging.Logger] = None
               ) -> tree_lib.ContractionTree:
  """Pick the contraction tree for `network`.

  An explicit `tree` wins over an explicit `order`, which wins over a cost
  optimization. Without any of them, networks in the NCON convention use
  the NCON order and all others are contracted left to right.
  """
  if len(network) == 0:
    raise ValueError("cannot plan a contraction without factors")
  if tree is not None:
    if isinstance(tree, tree_lib.ContractionTree):
      tree = tree.to_nested()
    return tree_lib.build_tree(tree, network, cost_model)
  if order is not None:
    return order_tree(network, order, cost_model)
  if cost_model is not None:
    return optimal_tree(network, cost_model, verbose=verbose,
                        logger=logger)[0]
  if network.is_ncon:
    return ncon_tree(network)
  return tree_lib.left_to_right_tree(network)


def plan(network: Union[ContractionNetwork, Sequence[Sequence[Label]]],
         cost_model: Optional[CostModel] = None,
         order: Optional[Sequence[Label]] = None,
         tree: Optional[Union[tree_lib.Nested,
                              tree_lib.ContractionTree]] = None,
         conjlist: Optional[Sequence[bool]] = None,
         output: Optional[Sequence[Label]] = None,
         key: Optional[Hashable] = None,
         alpha: Any = 1,
         beta: Any = 0,
         verbose: bool = False,
         logger: Optional[logging.Logger] = None) -> CompiledPlan:
  """Compile a network into a reusable `CompiledPlan`.

  Example:

    compiled = plan([[-1, 1], [1, 2], [2, -2]])
    result = execute(compiled, [a, b, c])

  Args:
    network: A `ContractionNetwork`, or one label sequence per factor.
    cost_model: Optimize the contraction tree for these label costs.
    order: Resolve the contracted labels in this order.
    tree: Use this tree, given as nested pairs of factor positions.
    conjlist: Conjugation flags, only with a label sequence per factor.
    output: Output label order, only with a label sequence per factor.
    key: Identifies the plan in cache keys. Defaults to a fresh unique
      value.
    alpha: Default scale of the result.
    beta: Default scale of the previous content of an output buffer.
    verbose: Report the tree search at INFO level.
    logger: Logger for the tree search.
  Returns:
    The compiled plan.
  Raises:
    MalformedNetwork: If the labels do not form a valid network or `order`
      is not a valid contraction order.
    IncomparableCost: If the label costs cannot be compared.
  """
  network = _as_network(network, conjlist, output)
  root = choose_tree(network, cost_model, order, tree, verbose, logger)
  instructions, temporaries = compile_tree(network, root, alpha, beta)
  if key is None:
    key = uuid.uuid4().hex
  compiled = CompiledPlan(network, root, instructions, temporaries, key, alpha,
                          beta)
  _logger.debug("compiled %r", compiled)
  return compiled


def optimal_contraction_tree(
    network: Union[ContractionNetwork, Sequence[Sequence[Label]]],
    cost_model: Optional[CostModel] = None,
    verbose: bool = False,
    logger: Optional[logging.Logger] = None
) -> Tuple[tree_lib.Nested, Poly]:
  """The optimal contraction tree as nested pairs, and its cost.

  Nothing is evaluated. The result can be passed as `tree` to `plan`.
  """
  network = _as_network(network, None, None)
  if cost_model is None:
    cost_model = CostModel.uniform()
  root, cost = optimal_tree(network, cost_model, verbose=verbose, logger=logger)
  return root.to_nested(), cost
