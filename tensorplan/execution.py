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
"""Evaluation of compiled plans against backend buffers."""

import logging
from typing import Any, Hashable, Optional, Sequence, Text, Tuple, Union
from tensorplan.backend_contextmanager import get_default_backend
from tensorplan.backends import backend_factory
from tensorplan.backends.abstract_backend import AbstractBackend
from tensorplan.cache import CacheManager
from tensorplan.compiler import (AddCall, CompiledPlan, ContractCall, Operand,
                                 OUTPUT, TEMPORARY, TraceCall)
from tensorplan.errors import DimensionMismatch
from tensorplan.network import Label
Tensor = Any

_logger = logging.getLogger(__name__)


def _match_extents(label: Label, extents: Sequence[int]) -> None:
  if len(set(extents)) > 1:
    raise DimensionMismatch(
        "label {} has mismatching extents {}".format(label, tuple(extents)),
        label=label,
        extents=extents)


def _check_output(out_shape: Tuple[int, ...], shape: Tuple[int, ...],
                  labels: Sequence[Label]) -> None:
  if len(out_shape) != len(shape):
    raise DimensionMismatch(
        "output buffer of shape {} cannot hold a result with labels {} and "
        "shape {}".format(out_shape, list(labels), shape),
        extents=(len(out_shape), len(shape)))
  for label, have, want in zip(labels, out_shape, shape):
    _match_extents(label, (have, want))


def execute(plan: CompiledPlan,
            tensors: Sequence[Tensor],
            out: Optional[Tensor] = None,
            alpha: Optional[Any] = None,
            beta: Optional[Any] = None,
            backend: Optional[Union[Text, AbstractBackend]] = None,
            cache: Optional[CacheManager] = None,
            context: Optional[Hashable] = None) -> Tensor:
  """Evaluate a compiled plan.

  The calls of the plan run in order. Extents are checked right before
  each call, so a `DimensionMismatch` leaves buffers written by earlier
  calls in their updated state and runs none of the later calls.

  Args:
    plan: The plan returned by `tensorplan.plan`.
    tensors: One buffer per factor of the network.
    out: If given, the result is accumulated into it as
      `out := beta * out + alpha * result`.
    alpha: Scale of the result. Defaults to `plan.alpha`.
    beta: Scale of the previous content of `out`. Defaults to `plan.beta`
      and is ignored without `out`.
    backend: The backend. Defaults to
      `tensorplan.backend_contextmanager.get_default_backend()`.
    cache: Recycle temporaries through this cache.
    context: Identifies the caller in cache keys. Concurrent evaluations
      sharing a cache must use distinct contexts.
  Returns:
    The result buffer, which is `out` when given.
  Raises:
    ValueError: If the number or ranks of `tensors` do not match the
      network.
    DimensionMismatch: If extents of the same label disagree.
  """
  if backend is None:
    backend = get_default_backend()
  backend_obj = backend_factory.get_backend(backend)
  network = plan.network
  if len(tensors) != len(network):
    raise ValueError("number of tensors ({}) does not match the number of "
                     "factors ({})".format(len(tensors), len(network)))
  tensors = [backend_obj.convert_to_tensor(t) for t in tensors]
  for n, (tensor, factor) in enumerate(zip(tensors, network.factors)):
    if len(backend_obj.shape_tuple(tensor)) != factor.rank:
      raise ValueError("number of indices does not match number of labels "
                       "on tensor {}.".format(n))

  if alpha is None:
    alpha = plan.alpha
  if out is None:
    beta = 0
  elif beta is None:
    beta = plan.beta

  buffers = {}
  acquired = []

  def fetch(operand: Operand) -> Tensor:
    if operand.kind == TEMPORARY or operand.kind == OUTPUT:
      return buffers[operand]
    return tensors[operand.index]

  def destination(operand: Operand, shape: Tuple[int, ...], labels, sources,
                  scalars) -> Tensor:
    if operand.kind == OUTPUT and out is not None:
      _check_output(tuple(backend_obj.shape_tuple(out)), shape, labels)
      buffers[operand] = out
      return out
    dtype = backend_obj.result_type(*sources, *scalars)
    if operand.kind == TEMPORARY and cache is not None:
      key = (plan.key, operand.index, context)
      buffer = cache.acquire(key, shape, dtype, like=sources[0],
                             backend=backend_obj)
      acquired.append((key, buffer))
    else:
      buffer = backend_obj.allocate_like(sources[0], dtype, shape)
    buffers[operand] = buffer
    return buffer

  last = len(plan.instructions) - 1
  _logger.debug("executing %r", plan)
  try:
    for n, call in enumerate(plan.instructions):
      if n == last:
        call = call._replace(alpha=alpha, beta=beta)
      scalars = (call.alpha,) if call.alpha != 1 else ()
      if isinstance(call, ContractCall):
        a = fetch(call.a)
        b = fetch(call.b)
        shape_a = backend_obj.shape_tuple(a)
        shape_b = backend_obj.shape_tuple(b)
        for i, j in zip(call.cind_a, call.cind_b):
          _match_extents(call.labels_a[i], (shape_a[i], shape_b[j]))
        open_extents = [
            d for i, d in enumerate(shape_a) if i not in call.cind_a
        ] + [d for j, d in enumerate(shape_b) if j not in call.cind_b]
        shape = tuple(open_extents[p] for p in call.perm)
        dst = destination(call.dst, shape, call.dst_labels, (a, b), scalars)
        backend_obj.contract(call.alpha, a, call.conj_a, b, call.conj_b,
                             call.beta, dst, call.cind_a, call.cind_b,
                             call.perm)
      elif isinstance(call, TraceCall):
        src = fetch(call.src)
        shape_src = backend_obj.shape_tuple(src)
        for i, j in zip(call.cind1, call.cind2):
          _match_extents(call.src_labels[i], (shape_src[i], shape_src[j]))
        shape = tuple(shape_src[p] for p in call.perm)
        dst = destination(call.dst, shape, call.dst_labels, (src,), scalars)
        backend_obj.trace(call.alpha, src, call.conj, call.beta, dst,
                          call.perm, call.cind1, call.cind2)
      elif isinstance(call, AddCall):
        src = fetch(call.src)
        shape_src = backend_obj.shape_tuple(src)
        shape = tuple(shape_src[p] for p in call.perm)
        dst = destination(call.dst, shape, call.dst_labels, (src,), scalars)
        backend_obj.add(call.alpha, src, call.conj, call.beta, dst, call.perm)
      else:
        raise TypeError("unknown primitive call {}".format(call))
  finally:
    for key, buffer in acquired:
      cache.release(key, buffer)
  return buffers[Operand(OUTPUT, 0)]
