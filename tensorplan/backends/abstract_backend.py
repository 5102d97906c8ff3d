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
from typing import Any, Optional, Sequence, Tuple, Union
# Backends store their buffers in whatever type suits them.
Tensor = Any
Scalar = Union[int, float, complex]


class AbstractBackend:
  """The primitives every backend has to provide.

  The three compute primitives update a destination buffer in place as
  `dst := beta * dst + alpha * op(...)`. When `beta` is zero the previous
  content of `dst` is ignored, so freshly allocated buffers need no
  initialization.
  """

  def __init__(self) -> None:
    self.name = 'abstract backend'

  def convert_to_tensor(self, tensor: Tensor) -> Tensor:
    """Convert a user supplied object into a buffer of this backend."""
    raise NotImplementedError(
        "Backend '{}' has not implemented convert_to_tensor.".format(
            self.name))

  def shape_tuple(self, tensor: Tensor) -> Tuple[int, ...]:
    """Get the shape of a buffer as a tuple of integers."""
    raise NotImplementedError(
        "Backend '{}' has not implemented shape_tuple.".format(self.name))

  def dtype(self, tensor: Tensor) -> Any:
    """The element type of a buffer."""
    raise NotImplementedError("Backend '{}' has not implemented dtype.".format(
        self.name))

  def result_type(self, *args: Any) -> Any:
    """The element type able to hold the result of combining `args`.

    Args:
      *args: Buffers and scalars.
    """
    raise NotImplementedError(
        "Backend '{}' has not implemented result_type.".format(self.name))

  def nbytes(self, tensor: Tensor) -> int:
    """The allocated size of a buffer in bytes."""
    raise NotImplementedError("Backend '{}' has not implemented nbytes.".format(
        self.name))

  def allocate_like(self, tensor: Tensor, dtype: Any,
                    shape: Sequence[int]) -> Tensor:
    """Allocate an uninitialized buffer similar to `tensor`.

    Args:
      tensor: A reference buffer, e.g. to pick the device.
      dtype: The element type of the new buffer.
      shape: The shape of the new buffer.
    Returns:
      The new buffer.
    """
    raise NotImplementedError(
        "Backend '{}' has not implemented allocate_like.".format(self.name))

  def add(self, alpha: Scalar, src: Tensor, conj: bool, beta: Scalar,
          dst: Tensor, perm: Sequence[int]) -> Tensor:
    """Permuted addition `dst := beta * dst + alpha * permute(op(src))`.

    Args:
      alpha: Scale of the added tensor.
      src: The source buffer.
      conj: Whether to conjugate `src`.
      beta: Scale of the previous content of `dst`.
      dst: The destination buffer, updated in place.
      perm: Axis `i` of `dst` corresponds to axis `perm[i]` of `src`.
    Returns:
      `dst`.
    """
    raise NotImplementedError("Backend '{}' has not implemented add.".format(
        self.name))

  def trace(self, alpha: Scalar, src: Tensor, conj: bool, beta: Scalar,
            dst: Tensor, perm: Sequence[int], cind1: Sequence[int],
            cind2: Sequence[int]) -> Tensor:
    """Partial trace followed by a permuted addition into `dst`.

    Axes `cind1[k]` and `cind2[k]` of `src` are summed over together.

    Args:
      alpha: Scale of the traced tensor.
      src: The source buffer.
      conj: Whether to conjugate `src`.
      beta: Scale of the previous content of `dst`.
      dst: The destination buffer, updated in place.
      perm: Axis `i` of `dst` corresponds to axis `perm[i]` of `src`.
      cind1: The first axis of every traced pair.
      cind2: The second axis of every traced pair.
    Returns:
      `dst`.
    """
    raise NotImplementedError("Backend '{}' has not implemented trace.".format(
        self.name))

  def contract(self, alpha: Scalar, a: Tensor, conj_a: bool, b: Tensor,
               conj_b: bool, beta: Scalar, dst: Tensor, cind_a: Sequence[int],
               cind_b: Sequence[int], perm: Sequence[int]) -> Tensor:
    """Pairwise contraction `dst := beta * dst + alpha * op(a) op(b)`.

    Axes `cind_a[k]` of `a` and `cind_b[k]` of `b` are summed over. The
    remaining axes of `a` followed by the remaining axes of `b`, each in
    their original order, form the result before permutation.

    Args:
      alpha: Scale of the product.
      a: The first operand.
      conj_a: Whether to conjugate `a`.
      b: The second operand.
      conj_b: Whether to conjugate `b`.
      beta: Scale of the previous content of `dst`.
      dst: The destination buffer, updated in place.
      cind_a: Contracted axes of `a`.
      cind_b: Contracted axes of `b`.
      perm: Axis `i` of `dst` corresponds to axis `perm[i]` of the result.
    Returns:
      `dst`.
    """
    raise NotImplementedError(
        "Backend '{}' has not implemented contract.".format(self.name))

  def item(self, tensor: Tensor) -> Scalar:
    """The single entry of a buffer without dimensions."""
    raise NotImplementedError("Backend '{}' has not implemented item.".format(
        self.name))

  def __repr__(self) -> str:
    return "{}()".format(type(self).__name__)
