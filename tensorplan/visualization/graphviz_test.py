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
"""Test of contraction tree Graphviz visualization."""

import graphviz
from tensorplan.contractors.ncon_tree import ncon_tree
from tensorplan.network import build_network
from tensorplan.visualization.graphviz import to_graphviz


def test_sanity_check():
  network = build_network([[-1, 1], [1, 2], [2, -2]])
  g = to_graphviz(ncon_tree(network))
  #pylint: disable=no-member
  assert isinstance(g, graphviz.Digraph)
  assert "leaf_0" in g.source
  assert "leaf_2" in g.source


def test_labels_with_network():
  network = build_network([['a', 'i'], ['i', 'b']],
                          conjlist=[True, False],
                          names=["A", None])
  tree = ncon_tree(build_network([[-1, 1], [1, -2]]))
  g = to_graphviz(tree, network)
  assert "A ['a', 'i']*" in g.source
  assert "1 ['i', 'b']" in g.source


def test_custom_graph():
  graph = graphviz.Digraph('custom')
  tree = ncon_tree(build_network([[-1, 1], [1, -2]]))
  assert to_graphviz(tree, graph=graph) is graph
