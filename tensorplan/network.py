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
"""Labelled tensor factors and the contraction networks built from them."""

import collections
import numbers
from typing import (Any, Dict, Hashable, List, Optional, Sequence, Tuple)
from tensorplan.errors import MalformedNetwork

Label = Hashable


class TensorFactor:
  """One factor of a network: a label per dimension and a conjugation flag.

  A label appearing twice within the same factor is traced out before the
  factor takes part in any pairwise contraction.
  """

  def __init__(self,
               labels: Sequence[Label],
               conj: bool = False,
               name: Optional[str] = None) -> None:
    self.labels = tuple(labels)
    self.conj = bool(conj)
    self.name = name

  @property
  def rank(self) -> int:
    return len(self.labels)

  @property
  def traced_labels(self) -> Tuple[Label, ...]:
    """Labels appearing twice on this factor, in order of first appearance."""
    counts = collections.Counter(self.labels)
    seen = []
    for label in self.labels:
      if counts[label] == 2 and label not in seen:
        seen.append(label)
    return tuple(seen)

  @property
  def open_labels(self) -> Tuple[Label, ...]:
    """Labels appearing once on this factor, in dimension order."""
    counts = collections.Counter(self.labels)
    return tuple(l for l in self.labels if counts[l] == 1)

  def conjugate(self) -> "TensorFactor":
    return TensorFactor(self.labels, not self.conj, self.name)

  def __eq__(self, other: Any) -> bool:
    if not isinstance(other, TensorFactor):
      return NotImplemented
    return self.labels == other.labels and self.conj == other.conj

  def __hash__(self) -> int:
    return hash((self.labels, self.conj))

  def __repr__(self) -> str:
    conj = ", conj=True" if self.conj else ""
    return "TensorFactor({}{})".format(list(self.labels), conj)


class ContractionNetwork:
  """A validated set of factors together with the order of the output labels.

  Use `build_network` to construct one; the constructor assumes the
  structure has already been checked.
  """

  def __init__(self, factors: Sequence[TensorFactor],
               output: Sequence[Label]) -> None:
    self.factors = tuple(factors)
    self.output = tuple(output)
    self._label_factors = None

  def __len__(self) -> int:
    return len(self.factors)

  @property
  def label_factors(self) -> Dict[Label, Tuple[int, ...]]:
    """Map each label to the (possibly repeated) factor positions holding it."""
    if self._label_factors is None:
      positions = collections.OrderedDict()
      for n, factor in enumerate(self.factors):
        for label in factor.labels:
          positions.setdefault(label, []).append(n)
      self._label_factors = collections.OrderedDict(
          (l, tuple(p)) for l, p in positions.items())
    return self._label_factors

  @property
  def labels(self) -> Tuple[Label, ...]:
    """All distinct labels in order of first appearance."""
    return tuple(self.label_factors.keys())

  @property
  def contracted_labels(self) -> Tuple[Label, ...]:
    """Labels shared between two distinct factors."""
    return tuple(l for l, p in self.label_factors.items()
                 if len(p) == 2 and p[0] != p[1])

  @property
  def traced_labels(self) -> Tuple[Label, ...]:
    """Labels traced out within a single factor."""
    return tuple(l for l, p in self.label_factors.items()
                 if len(p) == 2 and p[0] == p[1])

  @property
  def is_ncon(self) -> bool:
    return _follows_ncon_convention([f.labels for f in self.factors])

  def neighbours(self, n: int) -> List[int]:
    """Positions of the factors sharing a label with factor `n`."""
    result = set()
    for label in self.factors[n].labels:
      for m in self.label_factors[label]:
        if m != n:
          result.add(m)
    return sorted(result)

  def connected_components(self) -> List[List[int]]:
    """Group factor positions into connected components, in textual order."""
    seen = set()
    components = []
    for start in range(len(self.factors)):
      if start in seen:
        continue
      component = []
      stack = [start]
      seen.add(start)
      while stack:
        n = stack.pop()
        component.append(n)
        for m in self.neighbours(n):
          if m not in seen:
            seen.add(m)
            stack.append(m)
      components.append(sorted(component))
    return components

  def conjugate(self) -> "ContractionNetwork":
    """The network of the complex conjugate: every factor flag is flipped."""
    return ContractionNetwork([f.conjugate() for f in self.factors],
                              self.output)

  def structure_key(self) -> Tuple:
    """A hashable summary of everything a compiled plan depends on."""
    return (tuple((f.labels, f.conj) for f in self.factors), self.output)

  def __eq__(self, other: Any) -> bool:
    if not isinstance(other, ContractionNetwork):
      return NotImplemented
    return self.structure_key() == other.structure_key()

  def __hash__(self) -> int:
    return hash(self.structure_key())

  def __repr__(self) -> str:
    return "ContractionNetwork({}, output={})".format(
        list(self.factors), list(self.output))


def _is_integer_label(label: Label) -> bool:
  return isinstance(label, numbers.Integral) and not isinstance(label, bool)


def _follows_ncon_convention(network_structure: Sequence[Sequence[Label]]
                            ) -> bool:
  """Whether negative integers mark the free labels and positive integers
  mark contracted pairs."""
  flat_labels = [l for labels in network_structure for l in labels]
  if not flat_labels:
    return False
  if not all(_is_integer_label(l) and l != 0 for l in flat_labels):
    return False
  counts = collections.Counter(flat_labels)
  return all((count == 1) if label < 0 else (count == 2)
             for label, count in counts.items())


def default_output(network_structure: Sequence[Sequence[Label]]
                  ) -> Tuple[Label, ...]:
  """Output labels used when none are requested explicitly.

  For networks in the NCON convention these are the negative labels ordered
  by increasing absolute value. Otherwise they are the labels occurring
  exactly once, in factor order and then dimension order.
  """
  if _follows_ncon_convention(network_structure):
    flat_labels = [l for labels in network_structure for l in labels]
    return tuple(sorted((l for l in flat_labels if l < 0), reverse=True))
  counts = collections.Counter(
      l for labels in network_structure for l in labels)
  return tuple(l for labels in network_structure for l in labels
               if counts[l] == 1)


def check_network(network_structure: Sequence[Sequence[Label]],
                  output: Sequence[Label]) -> None:
  """Check that every label occurs once and is an output, or occurs twice.

  Raises:
    MalformedNetwork: naming the first offending label and its count.
  """
  counts = collections.Counter(
      l for labels in network_structure for l in labels)
  output_counts = collections.Counter(output)
  for label, count in output_counts.items():
    if count > 1:
      raise MalformedNetwork(
          "label {} appears {} times in the output".format(label, count),
          label=label,
          count=count)
  for label, count in counts.items():
    if count > 2:
      raise MalformedNetwork(
          "label {} appears {} times in the network; labels have to appear "
          "once (free) or twice (contracted)".format(label, count),
          label=label,
          count=count)
    if count == 1 and label not in output_counts:
      raise MalformedNetwork(
          "label {} appears once but is missing from the output {}".format(
              label, list(output)),
          label=label,
          count=count)
    if count == 2 and label in output_counts:
      raise MalformedNetwork(
          "label {} is contracted but also requested in the output".format(
              label),
          label=label,
          count=count)
  for label in output:
    if label not in counts:
      raise MalformedNetwork(
          "output label {} does not appear in the network".format(label),
          label=label,
          count=0)


def build_network(network_structure: Sequence[Sequence[Label]],
                  conjlist: Optional[Sequence[bool]] = None,
                  output: Optional[Sequence[Label]] = None,
                  names: Optional[Sequence[str]] = None) -> ContractionNetwork:
  """Build and validate a `ContractionNetwork`.

  Args:
    network_structure: One label sequence per factor.
    conjlist: Optional conjugation flag per factor.
    output: Optional output label order. See `default_output` for the
      order used otherwise.
    names: Optional names for the factors, used for display only.
  Returns:
    The network.
  Raises:
    ValueError: If `conjlist` or `names` do not match the number of factors.
    MalformedNetwork: If the label structure is invalid.
  """
  network_structure = [tuple(labels) for labels in network_structure]
  num_factors = len(network_structure)
  if conjlist is None:
    conjlist = [False] * num_factors
  if len(conjlist) != num_factors:
    raise ValueError("number of conjugation flags ({}) does not match the "
                     "number of factors ({})".format(len(conjlist),
                                                     num_factors))
  if names is None:
    names = [None] * num_factors
  if len(names) != num_factors:
    raise ValueError("number of names does not match the number of factors")
  if output is None:
    output = default_output(network_structure)
  output = tuple(output)
  check_network(network_structure, output)
  factors = [
      TensorFactor(labels, conj, name)
      for labels, conj, name in zip(network_structure, conjlist, names)
  ]
  return ContractionNetwork(factors, output)
