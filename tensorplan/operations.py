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
"""Elementary tensor operations with labelled indices.

Every function plans and executes a network of one or two factors. When
`out` is given the result is accumulated into it as
`out := beta * out + alpha * result` and `out` is returned; otherwise a
new buffer is returned and `beta` is ignored.
"""

import collections
from typing import Any, Optional, Sequence, Text, Union
from tensorplan.backend_contextmanager import get_default_backend
from tensorplan.backends import backend_factory
from tensorplan.backends.abstract_backend import AbstractBackend
from tensorplan.compiler import plan
from tensorplan.errors import MalformedNetwork
from tensorplan.execution import execute
from tensorplan.network import Label
Tensor = Any


def _free_labels(*label_lists: Sequence[Label]):
  counts = collections.Counter(l for labels in label_lists for l in labels)
  return tuple(l for labels in label_lists for l in labels if counts[l] == 1)


def tensorcopy(A: Tensor,
               IA: Sequence[Label],
               IC: Optional[Sequence[Label]] = None,
               out: Optional[Tensor] = None,
               alpha: Any = 1,
               beta: Any = 0,
               conj: bool = False,
               backend: Optional[Union[Text, AbstractBackend]] = None
              ) -> Tensor:
  """Permute the indices of `A` from order `IA` into order `IC`.

  `IC` defaults to `IA`, i.e. a plain copy.
  """
  if IC is None:
    IC = IA
  compiled = plan([IA], conjlist=[conj], output=IC)
  return execute(compiled, [A], out=out, alpha=alpha, beta=beta,
                 backend=backend)


def tensoradd(A: Tensor,
              IA: Sequence[Label],
              B: Tensor,
              IB: Sequence[Label],
              IC: Optional[Sequence[Label]] = None,
              out: Optional[Tensor] = None,
              alpha: Any = 1,
              beta: Any = 0,
              conj_a: bool = False,
              conj_b: bool = False,
              backend: Optional[Union[Text, AbstractBackend]] = None
             ) -> Tensor:
  """Add `A` and `B` after matching their indices by label.

  Both label sequences have to be permutations of `IC`, which defaults to
  `IA`.
  """
  if IC is None:
    IC = IA
  if backend is None:
    backend = get_default_backend()
  backend_obj = backend_factory.get_backend(backend)
  A = backend_obj.convert_to_tensor(A)
  B = backend_obj.convert_to_tensor(B)
  plan_a = plan([IA], conjlist=[conj_a], output=IC)
  plan_b = plan([IB], conjlist=[conj_b], output=IC)
  if out is None:
    shape_a = backend_obj.shape_tuple(A)
    shape = tuple(shape_a[list(IA).index(l)] for l in IC)
    out = backend_obj.allocate_like(A, backend_obj.result_type(A, B, alpha),
                                    shape)
    beta = 0
  execute(plan_a, [A], out=out, alpha=alpha, beta=beta, backend=backend_obj)
  return execute(plan_b, [B], out=out, alpha=alpha, beta=1,
                 backend=backend_obj)


def tensortrace(A: Tensor,
                IA: Sequence[Label],
                IC: Optional[Sequence[Label]] = None,
                out: Optional[Tensor] = None,
                alpha: Any = 1,
                beta: Any = 0,
                conj: bool = False,
                backend: Optional[Union[Text, AbstractBackend]] = None
               ) -> Tensor:
  """Trace over all labels appearing twice in `IA`.

  `IC` defaults to the remaining labels in the order of `IA`.
  """
  if IC is None:
    IC = _free_labels(IA)
  compiled = plan([IA], conjlist=[conj], output=IC)
  return execute(compiled, [A], out=out, alpha=alpha, beta=beta,
                 backend=backend)


def tensorcontract(A: Tensor,
                   IA: Sequence[Label],
                   B: Tensor,
                   IB: Sequence[Label],
                   IC: Optional[Sequence[Label]] = None,
                   out: Optional[Tensor] = None,
                   alpha: Any = 1,
                   beta: Any = 0,
                   conj_a: bool = False,
                   conj_b: bool = False,
                   backend: Optional[Union[Text, AbstractBackend]] = None
                  ) -> Tensor:
  """Contract `A` and `B` over the labels they share.

  Labels repeated within `IA` or `IB` are traced first. `IC` defaults to
  the free labels of `IA` followed by those of `IB`.

  Example:

    # matrix product
    C = tensorcontract(A, "ij", B, "jk")
  """
  if IC is None:
    IC = _free_labels(IA, IB)
  compiled = plan([IA, IB], conjlist=[conj_a, conj_b], output=IC)
  return execute(compiled, [A, B], out=out, alpha=alpha, beta=beta,
                 backend=backend)


def tensorproduct(A: Tensor,
                  IA: Sequence[Label],
                  B: Tensor,
                  IB: Sequence[Label],
                  IC: Optional[Sequence[Label]] = None,
                  out: Optional[Tensor] = None,
                  alpha: Any = 1,
                  beta: Any = 0,
                  conj_a: bool = False,
                  conj_b: bool = False,
                  backend: Optional[Union[Text, AbstractBackend]] = None
                 ) -> Tensor:
  """Outer product of `A` and `B`.

  Raises:
    MalformedNetwork: If a label appears more than once in `IA` and `IB`
      combined.
  """
  counts = collections.Counter(list(IA) + list(IB))
  repeated = [l for l, c in counts.items() if c > 1]
  if repeated:
    raise MalformedNetwork(
        "tensorproduct does not contract indices, but labels {} are "
        "repeated".format(repeated),
        label=repeated[0],
        count=counts[repeated[0]])
  return tensorcontract(A, IA, B, IB, IC, out=out, alpha=alpha, beta=beta,
                        conj_a=conj_a, conj_b=conj_b, backend=backend)
