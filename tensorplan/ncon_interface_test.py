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

import numpy as np
import pytest
from tensorplan import ncon_interface
from tensorplan.cache import CacheManager
from tensorplan.cost_model import CostModel
from tensorplan.errors import DimensionMismatch, MalformedNetwork


def test_sanity_check(backend):
  result = ncon_interface.ncon([np.ones(
      (2, 2)), np.ones((2, 2))], [(-1, 1), (1, -2)], backend=backend)
  np.testing.assert_allclose(result, np.ones((2, 2)) * 2)


def test_con_order(backend):
  a = np.ones((2, 2))

  result = ncon_interface.ncon([a, a], [(-1, 1), (1, -2)],
                               out_order=[-1, -2],
                               backend=backend)
  np.testing.assert_allclose(result, np.ones((2, 2)) * 2)

  result = ncon_interface.ncon([a, a], [(-1, 1), (1, -2)],
                               con_order=[1],
                               backend=backend)
  np.testing.assert_allclose(result, np.ones((2, 2)) * 2)

  result = ncon_interface.ncon([a, a], [(-1, 1), (1, -2)],
                               con_order=[1],
                               out_order=[-1, -2])
  np.testing.assert_allclose(result, np.ones((2, 2)) * 2)


def test_con_order_noninteger(backend):
  a = np.ones((2, 2))
  result = ncon_interface.ncon([a, a], [('-o1', 'i'), ('i', '-o2')],
                               con_order=['i'],
                               out_order=['-o1', '-o2'],
                               backend=backend)
  np.testing.assert_allclose(result, np.ones((2, 2)) * 2)


def test_invalid_network(backend):
  a = np.ones((2, 2))
  with pytest.raises(ValueError):
    ncon_interface.ncon([a, a], [(1, 2), (2, 1), (1, 2)], backend=backend)
  with pytest.raises(MalformedNetwork):
    ncon_interface.ncon([a, a], [(1, 2), (2, 2)], backend=backend)
  with pytest.raises(MalformedNetwork):
    ncon_interface.ncon([a, a], [(1, 2), (3, 1)], backend=backend)
  with pytest.raises(ValueError):
    ncon_interface.ncon([a, a], [(1, 2), (2, 0.1)], backend=backend)
  with pytest.raises(ValueError):
    ncon_interface.ncon([a, a], [(1, 2), (2, 't')], backend=backend)
  with pytest.raises(ValueError):
    ncon_interface.ncon([a, a], [(0, 1), (1, 0)], backend=backend)
  with pytest.raises(ValueError):
    ncon_interface.ncon([a, a], [(1,), (1, 2)], backend=backend)
  with pytest.raises(ValueError):
    ncon_interface.ncon([a, a], [(1, 'a-b'), (1, 'a-b')], backend=backend)


def test_invalid_order(backend):
  a = np.ones((2, 2))
  with pytest.raises(ValueError):
    ncon_interface.ncon([a, a], [(1, 2), (2, 1)],
                        con_order=[2, 3],
                        backend=backend)
  with pytest.raises(ValueError):
    ncon_interface.ncon([a, a], [(1, 2), (2, 1)],
                        out_order=[-1],
                        backend=backend)
  with pytest.raises(ValueError):
    ncon_interface.ncon([a, a], [('i1', 'i2'), ('i1', 'i2')],
                        con_order=['i1'],
                        out_order=[],
                        backend=backend)
  with pytest.raises(ValueError):
    ncon_interface.ncon([a, a], [('i1', 'i2'), ('i1', 'i2')],
                        con_order=['i1', 'i2'],
                        out_order=['i1'],
                        backend=backend)
  with pytest.raises(ValueError):
    ncon_interface.ncon([a, a], [('i1', 'i2'), ('i1', 'i2')],
                        con_order=['i1', 'i1', 'i2'],
                        out_order=[],
                        backend=backend)
  with pytest.raises(ValueError):
    ncon_interface.ncon([a, a], [(1, 2), (2, 1)],
                        con_order=[-1, 2],
                        backend=backend)


def test_out_of_order_contraction(backend):
  a = np.ones((2, 2, 2))
  with pytest.warns(UserWarning, match='Suboptimal ordering'):
    ncon_interface.ncon([a, a, a], [(-1, 1, 3), (1, 3, 2), (2, -2, -3)],
                        backend=backend)


def test_output_order(backend):
  a = np.random.randn(2, 2)
  res = ncon_interface.ncon([a], [(-2, -1)], backend=backend)
  np.testing.assert_allclose(res, a.transpose())


def test_string_output_order(backend):
  a = np.random.randn(2, 3)
  b = np.random.randn(3, 4)
  res = ncon_interface.ncon([a, b], [('-rick', 1), (1, '-morty')],
                            backend=backend)
  # string output labels are sorted
  np.testing.assert_allclose(res, (a @ b).T)


def test_outer_product(backend):
  a = np.array([1, 2, 3])
  b = np.array([1, 2])
  res = ncon_interface.ncon([a, b], [(-1,), (-2,)], backend=backend)
  np.testing.assert_allclose(res, np.kron(a, b).reshape((3, 2)))
  res = ncon_interface.ncon([a, a, a, a], [(1,), (1,), (2,), (2,)],
                            backend=backend)
  np.testing.assert_allclose(res, 196)


def test_trace(backend):
  a = np.ones((2, 2))
  res = ncon_interface.ncon([a], [(1, 1)], backend=backend)
  np.testing.assert_allclose(res, 2)
  assert isinstance(res, float)


def test_small_matmul(backend):
  a = np.random.randn(2, 2)
  b = np.random.randn(2, 2)
  res = ncon_interface.ncon([a, b], [(1, -1), (1, -2)], backend=backend)
  np.testing.assert_allclose(res, a.transpose() @ b)


def test_contraction(backend):
  a = np.random.randn(2, 2, 2)
  res = ncon_interface.ncon([a, a, a], [(-1, 1, 2), (1, 2, 3), (3, -2, -3)],
                            backend=backend)
  res_np = a.reshape((2, 4)) @ a.reshape((4, 2)) @ a.reshape((2, 4))
  res_np = res_np.reshape((2, 2, 2))
  np.testing.assert_allclose(res, res_np)


def test_node_trace(backend):
  a = np.random.randn(2, 3, 3, 2)
  res = ncon_interface.ncon([a], [(1, -1, -2, 1)], backend=backend)
  np.testing.assert_allclose(res, np.einsum("abca->bc", a))


def test_conjlist(backend):
  a = np.random.randn(3, 4) + 1j * np.random.randn(3, 4)
  res = ncon_interface.ncon([a, a], [(1, -1), (1, -2)],
                            conjlist=[True, False],
                            backend=backend)
  np.testing.assert_allclose(res, a.conj().T @ a)


def test_cost_model(backend):
  a = np.random.randn(2, 3)
  b = np.random.randn(3, 4)
  c = np.random.randn(4, 5)
  res = ncon_interface.ncon([a, b, c], [(-1, 1), (1, 2), (2, -2)],
                            cost_model=CostModel.explicit({
                                -1: 2,
                                1: 3,
                                2: 4,
                                -2: 5
                            }),
                            backend=backend)
  np.testing.assert_allclose(res, a @ b @ c)


def test_dimension_mismatch(backend):
  with pytest.raises(DimensionMismatch) as info:
    ncon_interface.ncon([np.ones((2, 3)), np.ones((4, 2))], [(-1, 1),
                                                              (1, -2)],
                        backend=backend)
  assert info.value.label == 1


def test_unchecked_dimension_mismatch(backend):
  with pytest.raises(DimensionMismatch):
    ncon_interface.ncon([np.ones((2, 3)), np.ones((4, 2))], [(-1, 1),
                                                              (1, -2)],
                        check_network=False,
                        backend=backend)


def test_cache_key(backend):
  cache = CacheManager(maxsize=10**6)
  a = np.random.randn(2, 3, 4)
  structure = [(-1, 1, 2), (1, 2, 3), (3, -2, -3)]
  first = ncon_interface.ncon([a, np.ones((3, 4, 2)), np.ones((2, 2, 2))],
                              structure,
                              cache=cache,
                              cache_key="site",
                              backend=backend)
  second = ncon_interface.ncon([a, np.ones((3, 4, 2)), np.ones((2, 2, 2))],
                               structure,
                               cache=cache,
                               cache_key="site",
                               backend=backend)
  np.testing.assert_allclose(first, second)
  assert len(ncon_interface._CACHED_PLANS) == 1
  assert cache.hits == 1
  assert len(cache) == 1


def test_no_cache_without_key(backend):
  cache = CacheManager(maxsize=10**6)
  ncon_interface.ncon([np.ones((2, 2))] * 3, [(-1, 1), (1, 2), (2, -2)],
                      cache=cache,
                      backend=backend)
  assert len(cache) == 0
  assert not ncon_interface._CACHED_PLANS
