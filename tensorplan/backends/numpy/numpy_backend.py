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
from typing import Any, Optional, Sequence, Tuple
from tensorplan.backends import abstract_backend
import numpy as np
import opt_einsum
Tensor = Any


def _update(dst: Tensor, alpha, value: Tensor, beta) -> Tensor:
  if beta == 0:
    dst[...] = alpha * value if alpha != 1 else value
  else:
    if beta != 1:
      dst *= beta
    dst += alpha * value if alpha != 1 else value
  return dst


class NumPyBackend(abstract_backend.AbstractBackend):
  """See abstract_backend.AbstractBackend for documentation."""

  def __init__(self) -> None:
    super().__init__()
    self.name = "numpy"

  def convert_to_tensor(self, tensor: Tensor) -> Tensor:
    if (not isinstance(tensor, np.ndarray) and not np.isscalar(tensor)):
      raise TypeError("Expected a `np.array` or scalar. Got {}".format(
          type(tensor)))
    return np.asarray(tensor)

  def shape_tuple(self, tensor: Tensor) -> Tuple[Optional[int], ...]:
    return tensor.shape

  def dtype(self, tensor: Tensor) -> Any:
    return tensor.dtype

  def result_type(self, *args: Any) -> Any:
    return np.result_type(*args)

  def nbytes(self, tensor: Tensor) -> int:
    return tensor.nbytes

  def allocate_like(self, tensor: Tensor, dtype: Any,
                    shape: Sequence[int]) -> Tensor:
    return np.empty(tuple(shape), dtype=dtype)

  def add(self, alpha, src: Tensor, conj: bool, beta, dst: Tensor,
          perm: Sequence[int]) -> Tensor:
    if conj:
      src = np.conj(src)
    return _update(dst, alpha, np.transpose(src, tuple(perm)), beta)

  def trace(self, alpha, src: Tensor, conj: bool, beta, dst: Tensor,
            perm: Sequence[int], cind1: Sequence[int],
            cind2: Sequence[int]) -> Tensor:
    if conj:
      src = np.conj(src)
    subscripts = list(range(src.ndim))
    for i, j in zip(cind1, cind2):
      subscripts[j] = subscripts[i]
    value = np.einsum(src, subscripts, [subscripts[p] for p in perm])
    return _update(dst, alpha, value, beta)

  def contract(self, alpha, a: Tensor, conj_a: bool, b: Tensor, conj_b: bool,
               beta, dst: Tensor, cind_a: Sequence[int],
               cind_b: Sequence[int], perm: Sequence[int]) -> Tensor:
    if conj_a:
      a = np.conj(a)
    if conj_b:
      b = np.conj(b)
    # every axis gets its own subscript, contracted pairs share one
    subscripts_a = list(range(a.ndim))
    subscripts_b = list(range(a.ndim, a.ndim + b.ndim))
    for i, j in zip(cind_a, cind_b):
      subscripts_b[j] = subscripts_a[i]
    open_subscripts = [
        s for n, s in enumerate(subscripts_a) if n not in cind_a
    ] + [s for n, s in enumerate(subscripts_b) if n not in cind_b]
    value = opt_einsum.contract(a, subscripts_a, b, subscripts_b,
                                [open_subscripts[p] for p in perm])
    return _update(dst, alpha, value, beta)

  def item(self, tensor: Tensor):
    return tensor.item()
