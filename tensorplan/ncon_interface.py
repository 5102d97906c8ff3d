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
"""NCON interface to tensorplan."""

import threading
from typing import (Any, Dict, Hashable, List, Optional, Sequence, Text, Tuple,
                    Union)
from tensorplan import compiler
from tensorplan.backend_contextmanager import get_default_backend
from tensorplan.backends import backend_factory
from tensorplan.backends.abstract_backend import AbstractBackend
from tensorplan.cache import CacheManager
from tensorplan.cost_model import CostModel
from tensorplan.errors import DimensionMismatch
from tensorplan.execution import execute
from tensorplan.network import build_network
Tensor = Any

# (cache_key, network structure, output, order, cost model) -> CompiledPlan
_CACHED_PLANS = {}
_CACHED_PLANS_LOCK = threading.Lock()


def _get_out_labels(
    network_structure: Sequence[Sequence[Union[int, str]]]) -> List:
  """
  Compute the default output labels of `network_structure`.

  Negative number-type labels come first, ordered by increasing absolute
  value, followed by hyphen-prepended str-type labels in ASCII order.
  """
  flat_labels = [l for sublist in network_structure for l in sublist]
  int_labels = {o for o in flat_labels if not isinstance(o, str)}
  str_labels = {o for o in flat_labels if isinstance(o, str)}
  int_out_labels = sorted([l for l in int_labels if l < 0], reverse=True)
  str_out_labels = sorted([l for l in str_labels if l.startswith('-')])
  return int_out_labels + str_out_labels


def _check_network(network_structure: Sequence[Sequence[Union[int, str]]],
                   tensor_dimensions: List[Tuple[int]],
                   con_order: Optional[Sequence[Union[int, str]]] = None,
                   out_order: Optional[Sequence[Union[int, str]]] = None
                  ) -> None:
  """
  Perform checks on `network_structure`.

  Label counts are checked when the network is built, see
  `tensorplan.network.check_network`.
  """
  # check if number of tensors matches the number of lists
  # in network_structure
  if len(network_structure) != len(tensor_dimensions):
    raise ValueError("number of tensors does not match the"
                     " number of network connections.")

  # check number of labels of each element in network_structure
  # matches the tensor order
  for n, dims in enumerate(tensor_dimensions):
    if len(dims) != len(network_structure[n]):
      raise ValueError(f"number of indices does not match"
                       f" number of labels on tensor {n}.")

  flat_labels = [l for sublist in network_structure for l in sublist]
  str_labels = [
      l[1:] if l.startswith('-') else l
      for l in flat_labels
      if isinstance(l, str)
  ]
  bad = [l for l in str_labels if not l.isalnum()]
  if bad:
    raise ValueError(f"only alphanumeric values allowed for string labels, "
                     f"found {bad}")
  # make sure no value 0 is used as a label (legacy behaviour)
  if 0 in [l for l in flat_labels if not isinstance(l, str)]:
    raise ValueError("only nonzero values are allowed to "
                     "specify network structure.")

  if con_order is not None:
    #check that all integer elements in `con_order` are positive
    labels = [o for o in con_order if not isinstance(o, str) and o < 0]
    if len(labels) > 0:
      raise ValueError(f"all number type labels in `con_order` have "
                       f"to be positive, found {labels}")
    #check that all string type elements in `con_order` have no hyphens
    labels = [o for o in con_order if isinstance(o, str) and o[:1] == '-']
    if len(labels) > 0:
      raise ValueError(f"all string type labels in `con_order` "
                       f"must be unhyphenized, found {labels}")

  if out_order is not None:
    #check that all integer elements in `out_order` are negative
    labels = [o for o in out_order if not isinstance(o, str) and o > 0]
    if len(labels) > 0:
      raise ValueError(f"all number type labels in `out_order` have "
                       f"to be negative, found {labels}")
    #check that all string type elements in `out_order` have hyphens
    labels = [o for o in out_order if isinstance(o, str) and o[:1] != '-']
    if len(labels) > 0:
      raise ValueError(f"all string type labels in `out_order` "
                       f"have to be hyphenized, found {labels}")

  # check if contracted dimensions are matching
  extents = {}
  for m, labels in enumerate(network_structure):
    for n, l in enumerate(labels):
      extents.setdefault(l, []).append(tensor_dimensions[m][n])
  for l, dims in extents.items():
    if len(set(dims)) > 1:
      raise DimensionMismatch(
          f"tensor dimensions for label {l} are mismatching: {dims}",
          label=l,
          extents=dims)


def _get_plan(network_structure: Sequence[Sequence[Union[int, str]]],
              conjlist: Optional[Sequence[bool]],
              con_order: Optional[Sequence[Union[int, str]]],
              out_order: Optional[Sequence[Union[int, str]]],
              cost_model: Optional[CostModel],
              cache_key: Optional[Hashable]) -> compiler.CompiledPlan:

  def compile_plan():
    output = out_order
    if output is None:
      output = _get_out_labels(network_structure)
    network = build_network(network_structure, conjlist, output)
    return compiler.plan(network, cost_model=cost_model, order=con_order)

  if cache_key is None:
    return compile_plan()
  memo_key = (cache_key, tuple(tuple(l) for l in network_structure),
              tuple(bool(c) for c in conjlist) if conjlist else None,
              tuple(out_order) if out_order is not None else None,
              tuple(con_order) if con_order is not None else None,
              repr(cost_model))
  with _CACHED_PLANS_LOCK:
    cached = _CACHED_PLANS.get(memo_key)
  if cached is None:
    cached = compile_plan()
    with _CACHED_PLANS_LOCK:
      cached = _CACHED_PLANS.setdefault(memo_key, cached)
  return cached


def clear_plan_cache() -> None:
  """Forget all plans memoized through `cache_key`."""
  with _CACHED_PLANS_LOCK:
    _CACHED_PLANS.clear()


def ncon(tensors: Sequence[Tensor],
         network_structure: Sequence[Sequence[Union[str, int]]],
         conjlist: Optional[Sequence[bool]] = None,
         con_order: Optional[Sequence] = None,
         out_order: Optional[Sequence] = None,
         check_network: bool = True,
         backend: Optional[Union[Text, AbstractBackend]] = None,
         cost_model: Optional[CostModel] = None,
         cache: Optional[CacheManager] = None,
         cache_key: Optional[Hashable] = None,
         context: Optional[Hashable] = None) -> Tensor:
  r"""Contracts a list of backend-tensors according to a tensor network
    specification.

    The network is provided as a list of lists, one for each
    tensor, specifying the labels for the edges connected to that tensor.

    Labels can be any numbers or strings. Negative number-type labels
    and string-type labels with a prepended hyphen ('-') are open labels
    and remain uncontracted. Positive number-type labels and string-type
    labels with no prepended hyphen ('-') are closed labels and are
    contracted. Every closed label appears exactly twice, every open label
    exactly once; a closed label appearing twice on the same tensor is
    traced out.

    If `out_order = None`, output labels are ordered according to descending
    number ordering and ascending ASCII ordering, with number labels always
    appearing before string labels. Example:
    network_structure = [[-1, 1, '-rick', '2',-2], [-2, '2', 1, '-morty']]
    results in an output order of [-1, -2, '-morty', '-rick'].

    If `con_order` is given, closed labels are contracted in this order.
    Otherwise the contraction tree is optimized for `cost_model` if one is
    given, and the NCON order (closed labels in ascending order) is used
    for integer labels. Networks with string labels are contracted left to
    right.

    For example, matrix multiplication:

    .. code-block:: python

      A = np.array([[1.0, 2.0], [3.0, 4.0]])
      B = np.array([[1.0, 1.0], [0.0, 1.0]])
      ncon([A,B], [(-1, 1), (1, -2)])

    Matrix trace:

    .. code-block:: python

      A = np.array([[1.0, 2.0], [3.0, 4.0]])
      ncon([A], [(1, 1)]) # 5.0

    Note:
      Disallowing `0` as an edge label is legacy behaviour, see
      `original NCON implementation`_.

    .. _original NCON implementation:
      https://arxiv.org/abs/1402.0939

    Args:
      tensors: List of backend-tensors.
      network_structure: List of lists specifying the tensor network structure.
      conjlist: List of booleans, `True` for tensors to be conjugated.
      con_order: List of edge labels specifying the contraction order.
      out_order: List of edge labels specifying the output order.
      check_network: Boolean flag. If `True` check the network.
      backend: String specifying the backend to use. Defaults to
        `tensorplan.backend_contextmanager.get_default_backend`.
      cost_model: Optimize the contraction tree for these label costs.
      cache_key: If given, the compiled plan is memoized under this key and
        its temporaries are recycled through `cache`.
      cache: The `CacheManager` holding temporaries.
      context: Identifies the caller in cache keys, e.g. a worker id.

    Returns:
      The result of the contraction: a backend-tensor, or a scalar if
      all labels are contracted.
    Raises:
      MalformedNetwork: If a label occurs a wrong number of times.
      DimensionMismatch: If the extents of a label disagree.
  """
  if backend is None:
    backend = get_default_backend()
  backend_obj = backend_factory.get_backend(backend)
  tensors = [backend_obj.convert_to_tensor(t) for t in tensors]
  if check_network:
    _check_network(network_structure,
                   [backend_obj.shape_tuple(t) for t in tensors], con_order,
                   out_order)
  elif len(network_structure) != len(tensors):
    raise ValueError("number of tensors does not match the"
                     " number of network connections.")

  compiled = _get_plan(network_structure, conjlist, con_order, out_order,
                       cost_model, cache_key)
  res_tensor = execute(
      compiled,
      tensors,
      backend=backend_obj,
      cache=cache if cache_key is not None else None,
      context=context)
  if len(compiled.output) == 0:
    return backend_obj.item(res_tensor)
  return res_tensor
