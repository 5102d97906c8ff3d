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
"""Costs of index labels, as numbers or polynomials in a scaling variable.

Polynomial costs describe the asymptotic limit of a large scaling variable,
e.g. a bond dimension `chi`. They are ordered first by degree, then by
their coefficients from the leading one downwards, so that
`chi**2 > 1000 * chi` and `2 * chi**2 > chi**2 + chi`.
"""

import functools
import numbers
from typing import Any, Dict, Hashable, Iterable, Optional, Tuple, Union
from tensorplan import config
from tensorplan.errors import IncomparableCost

Number = Union[int, float]


@functools.total_ordering
class Poly:
  """A polynomial with nonnegative integer exponents in one variable.

  Constants carry no variable and combine with polynomials in any variable.
  """
  __slots__ = ('coeffs', 'symbol')

  def __init__(self,
               coeffs: Optional[Dict[int, Number]] = None,
               symbol: Optional[str] = None) -> None:
    coeffs = {} if coeffs is None else coeffs
    for exponent in coeffs:
      if not isinstance(exponent, numbers.Integral) or exponent < 0:
        raise ValueError(
            "exponents have to be nonnegative integers, found {}".format(
                exponent))
    self.coeffs = {int(e): c for e, c in coeffs.items() if c != 0}
    if any(e > 0 for e in self.coeffs):
      if symbol is None:
        raise ValueError("a non-constant polynomial needs a variable name")
      self.symbol = symbol
    else:
      self.symbol = None

  @classmethod
  def constant(cls, value: Number) -> "Poly":
    return cls({0: value})

  @classmethod
  def variable(cls, symbol: Optional[str] = None) -> "Poly":
    if symbol is None:
      symbol = config.default_cost_symbol
    return cls({1: 1}, symbol)

  @property
  def degree(self) -> int:
    return max(self.coeffs, default=0)

  @property
  def leading_coefficient(self) -> Number:
    return self.coeffs.get(self.degree, 0)

  @property
  def is_constant(self) -> bool:
    return self.symbol is None

  def _order_key(self) -> Tuple:
    degree = self.degree
    return (degree,) + tuple(
        self.coeffs.get(e, 0) for e in range(degree, -1, -1))

  def evaluate(self, value: Number) -> Number:
    """Substitute `value` for the scaling variable."""
    return sum(c * value**e for e, c in self.coeffs.items())

  def __add__(self, other: Any) -> "Poly":
    other = _coerce(other)
    if other is NotImplemented:
      return other
    symbol = _common_symbol(self, other)
    coeffs = dict(self.coeffs)
    for e, c in other.coeffs.items():
      coeffs[e] = coeffs.get(e, 0) + c
    return Poly(coeffs, symbol)

  __radd__ = __add__

  def __mul__(self, other: Any) -> "Poly":
    other = _coerce(other)
    if other is NotImplemented:
      return other
    symbol = _common_symbol(self, other)
    coeffs = {}
    for e1, c1 in self.coeffs.items():
      for e2, c2 in other.coeffs.items():
        coeffs[e1 + e2] = coeffs.get(e1 + e2, 0) + c1 * c2
    return Poly(coeffs, symbol)

  __rmul__ = __mul__

  def __pow__(self, exponent: int) -> "Poly":
    if not isinstance(exponent, numbers.Integral) or exponent < 0:
      return NotImplemented
    result = Poly.constant(1)
    for _ in range(exponent):
      result = result * self
    return result

  def __eq__(self, other: Any) -> bool:
    other = _coerce(other)
    if other is NotImplemented:
      return other
    if not (self.is_constant or other.is_constant) and (self.symbol !=
                                                        other.symbol):
      return False
    return self.coeffs == other.coeffs

  def __lt__(self, other: Any) -> bool:
    other = _coerce(other)
    if other is NotImplemented:
      return other
    _common_symbol(self, other)
    return self._order_key() < other._order_key()

  def __hash__(self) -> int:
    if self.is_constant:
      return hash(self.coeffs.get(0, 0))
    return hash((self.symbol, self._order_key()))

  def __repr__(self) -> str:
    if not self.coeffs:
      return "0"
    terms = []
    for e in sorted(self.coeffs, reverse=True):
      c = self.coeffs[e]
      if e == 0:
        terms.append(str(c))
        continue
      power = self.symbol if e == 1 else "{}^{}".format(self.symbol, e)
      terms.append(power if c == 1 else "{}*{}".format(c, power))
    return " + ".join(terms)


def _coerce(value: Any) -> Any:
  if isinstance(value, Poly):
    return value
  if isinstance(value, numbers.Real) and not isinstance(value, bool):
    return Poly.constant(value)
  return NotImplemented


def _common_symbol(p1: Poly, p2: Poly) -> Optional[str]:
  if p1.is_constant:
    return p2.symbol
  if p2.is_constant or p1.symbol == p2.symbol:
    return p1.symbol
  raise IncomparableCost(
      "cannot combine costs in different scaling variables '{}' and "
      "'{}'".format(p1.symbol, p2.symbol))


def as_cost(value: Any) -> Poly:
  """Convert a number or `Poly` into a nonnegative `Poly` cost."""
  cost = _coerce(value)
  if cost is NotImplemented:
    raise TypeError("costs have to be numbers or `Poly` objects, "
                    "found {}".format(type(value)))
  if any(c < 0 for c in cost.coeffs.values()):
    raise ValueError("costs have to be nonnegative, found {}".format(cost))
  return cost


class CostModel:
  """Assigns a cost to every index label of a network.

  Listed labels get their listed cost, all other labels get `default`.
  """

  def __init__(self,
               costs: Optional[Dict[Hashable, Any]] = None,
               default: Any = 1) -> None:
    costs = {} if costs is None else costs
    self.costs = {label: as_cost(c) for label, c in costs.items()}
    self.default = as_cost(default)
    self.symbol = None
    for cost in list(self.costs.values()) + [self.default]:
      if cost.is_constant:
        continue
      if self.symbol is None:
        self.symbol = cost.symbol
      elif cost.symbol != self.symbol:
        raise IncomparableCost(
            "all costs have to use the same scaling variable, found '{}' "
            "and '{}'".format(self.symbol, cost.symbol))

  @classmethod
  def uniform(cls, symbol: Optional[str] = None) -> "CostModel":
    """Every label costs the scaling variable."""
    return cls(default=Poly.variable(symbol))

  @classmethod
  def listed(cls,
             labels: Iterable[Hashable],
             symbol: Optional[str] = None,
             invert: bool = False) -> "CostModel":
    """Listed labels cost the scaling variable and all others cost 1.

    With `invert=True` the listed labels cost 1 and all others cost the
    scaling variable.
    """
    chi = Poly.variable(symbol)
    listed, other = (1, chi) if invert else (chi, 1)
    return cls({label: listed for label in labels}, default=other)

  @classmethod
  def explicit(cls, costs: Dict[Hashable, Any],
               default: Any = 1) -> "CostModel":
    """Costs as listed, unlisted labels cost `default`."""
    return cls(costs, default)

  def cost_of(self, label: Hashable) -> Poly:
    return self.costs.get(label, self.default)

  def __repr__(self) -> str:
    return "CostModel({}, default={})".format(self.costs, self.default)
