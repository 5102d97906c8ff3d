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

import pytest
from tensorplan.contractors.ncon_tree import ncon_tree, order_tree
from tensorplan.errors import MalformedNetwork
from tensorplan.network import build_network


@pytest.fixture(name="network")
def network_fixture():
  return build_network([[-1, 3, 1, -2, 2], [3, 2, 4, -5], [1, 4, -4, -3]])


def test_ncon_order(network):
  root = ncon_tree(network)
  # label 1 is shared by the first and third factor
  assert root.to_nested() == ((0, 2), 1)
  assert root.left.contracted == frozenset([1])
  assert root.contracted == frozenset([2, 3, 4])
  assert sorted(root.labels) == sorted(network.output)
  assert network.output == (-1, -2, -3, -4, -5)


def test_ncon_order_is_deterministic(network):
  first = ncon_tree(network)
  for _ in range(5):
    again = ncon_tree(build_network([[-1, 3, 1, -2, 2], [3, 2, 4, -5],
                                     [1, 4, -4, -3]]))
    assert again == first
    assert again.to_nested() == first.to_nested()
    assert again.labels == first.labels


def test_explicit_order(network):
  root = order_tree(network, [3, 2, 1, 4])
  assert root.to_nested() == ((0, 1), 2)
  assert root.left.contracted == frozenset([2, 3])


@pytest.mark.parametrize("order", [[1, 2, 3], [1, 2, 3, 4, 4],
                                   [1, 2, 3, 4, 5], [1, 2, 3, -1, 4]])
def test_invalid_order(network, order):
  with pytest.raises(MalformedNetwork):
    order_tree(network, order)


def test_suboptimal_order_warns():
  network = build_network([(-1, 1, 3), (1, 3, 2), (2, -2, -3)])
  with pytest.warns(UserWarning, match='Suboptimal ordering'):
    ncon_tree(network)


def test_outer_products_in_textual_order():
  network = build_network([[-3], [1, -1], [-2], [1, -4]])
  root = ncon_tree(network)
  assert root.to_nested() == (((0, (1, 3)), 2))


def test_traced_labels_are_skipped():
  network = build_network([[1, 1, 2], [2, -1]])
  assert ncon_tree(network).to_nested() == (0, 1)
  assert order_tree(network, [2]).to_nested() == (0, 1)


def test_non_ncon_network():
  with pytest.raises(ValueError):
    ncon_tree(build_network([['a', 'i'], ['i', 'b']]))
