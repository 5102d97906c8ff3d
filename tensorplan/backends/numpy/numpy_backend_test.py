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
"""Tests for the NumPy backend primitives."""

import numpy as np
import pytest
from tensorplan.backends.numpy import numpy_backend

np_dtypes = [np.float32, np.float64, np.complex64, np.complex128, np.int32]


@pytest.fixture(name="backend_obj")
def backend_obj_fixture():
  return numpy_backend.NumPyBackend()


def test_convert_to_tensor(backend_obj):
  array = np.ones((2, 3, 4))
  actual = backend_obj.convert_to_tensor(array)
  assert isinstance(actual, np.ndarray)
  np.testing.assert_allclose(actual, array)
  assert backend_obj.convert_to_tensor(3.0).shape == ()
  with pytest.raises(TypeError):
    backend_obj.convert_to_tensor([1, 2])


@pytest.mark.parametrize("dtype", np_dtypes)
def test_allocate_like(backend_obj, dtype):
  buffer = backend_obj.allocate_like(np.ones(3), dtype, (2, 4))
  assert buffer.shape == (2, 4)
  assert buffer.dtype == dtype
  assert backend_obj.nbytes(buffer) == 8 * np.dtype(dtype).itemsize
  assert backend_obj.shape_tuple(buffer) == (2, 4)
  assert backend_obj.dtype(buffer) == dtype


def test_result_type(backend_obj):
  a = np.ones(2, dtype=np.float32)
  b = np.ones(2, dtype=np.complex128)
  assert backend_obj.result_type(a, b) == np.complex128
  assert backend_obj.result_type(a) == np.float32


def test_add(backend_obj, rng):
  src = rng.randn(2, 3, 4)
  dst = np.empty((4, 2, 3))
  result = backend_obj.add(1, src, False, 0, dst, (2, 0, 1))
  assert result is dst
  np.testing.assert_allclose(dst, src.transpose(2, 0, 1))


def test_add_scalars(backend_obj, rng):
  src = rng.randn(2, 3) + 1j * rng.randn(2, 3)
  dst = np.ones((3, 2), dtype=np.complex128)
  backend_obj.add(2.0, src, True, 3.0, dst, (1, 0))
  np.testing.assert_allclose(dst, 3.0 + 2.0 * src.conj().T)


def test_add_ignores_uninitialized_destination(backend_obj, rng):
  src = rng.randn(3)
  dst = np.full(3, np.nan)
  backend_obj.add(1, src, False, 0, dst, (0,))
  np.testing.assert_allclose(dst, src)


def test_trace(backend_obj, rng):
  src = rng.randn(3, 2, 3, 4)
  dst = np.empty((4, 2))
  backend_obj.trace(1, src, False, 0, dst, (3, 1), (0,), (2,))
  np.testing.assert_allclose(dst, np.einsum("ijik->kj", src))


def test_trace_to_scalar(backend_obj, rng):
  src = rng.randn(3, 3)
  dst = np.empty(())
  backend_obj.trace(0.5, src, False, 0, dst, (), (0,), (1,))
  np.testing.assert_allclose(dst, 0.5 * np.trace(src))
  assert isinstance(backend_obj.item(dst), float)


def test_contract(backend_obj, rng):
  a = rng.randn(2, 3, 4)
  b = rng.randn(4, 5, 3)
  dst = np.empty((5, 2))
  backend_obj.contract(1, a, False, b, False, 0, dst, (1, 2), (2, 0), (1, 0))
  np.testing.assert_allclose(dst, np.tensordot(a, b, ([1, 2], [2, 0])).T)


def test_contract_scalars_and_conj(backend_obj, rng):
  a = rng.randn(2, 3) + 1j * rng.randn(2, 3)
  b = rng.randn(3, 4) + 1j * rng.randn(3, 4)
  dst = np.ones((2, 4), dtype=np.complex128)
  backend_obj.contract(2.0, a, True, b, False, 1, dst, (1,), (0,), (0, 1))
  np.testing.assert_allclose(dst, 1 + 2.0 * a.conj() @ b)


def test_outer_product(backend_obj, rng):
  a = rng.randn(2)
  b = rng.randn(3)
  dst = np.empty((3, 2))
  backend_obj.contract(1, a, False, b, False, 0, dst, (), (), (1, 0))
  np.testing.assert_allclose(dst, np.outer(a, b).T)
