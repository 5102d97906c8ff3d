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
"""Graphviz rendering of contraction trees."""

import graphviz
from typing import Optional, Text
from tensorplan.contractors.tree import ContractionTree
from tensorplan.network import ContractionNetwork


#pylint: disable=no-member
def to_graphviz(tree: ContractionTree,
                network: Optional[ContractionNetwork] = None,
                graph: Optional[graphviz.Digraph] = None,
                engine: Text = "dot") -> graphviz.Digraph:
  """Create a graphviz Digraph of a contraction tree.

  Edges point from the operands to the tensor they are contracted into.

  Args:
    tree: The root of the tree.
    network: If given, leaves also show the labels and names of their
      factors.
    graph: An optional `graphviz.Digraph` object to write to. Use this only
      if you wish to set custom attributes for the graph.
    engine: The graphviz engine to use. Only applicable if `graph` is None.

  Returns:
    The `graphviz.Digraph` object.
  """
  if graph is None:
    #pylint: disable=no-member
    graph = graphviz.Digraph('G', engine=engine)

  def add(node):
    if node.is_leaf:
      name = "leaf_{}".format(node.index)
      label = str(node.index)
      if network is not None:
        factor = network.factors[node.index]
        if factor.name:
          label = factor.name
        label = "{} {}{}".format(label, list(factor.labels),
                                 "*" if factor.conj else "")
      graph.node(name, label=label, shape="box")
      return name
    left = add(node.left)
    right = add(node.right)
    name = "node_{}".format(id(node))
    contracted = sorted(node.contracted, key=repr)
    graph.node(name, label="{} | {}".format(contracted, node.cost))
    graph.edge(left, name)
    graph.edge(right, name)
    return name

  add(tree)
  return graph
