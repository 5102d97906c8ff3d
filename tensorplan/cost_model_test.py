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
from tensorplan.cost_model import CostModel, Poly, as_cost
from tensorplan.errors import IncomparableCost

chi = Poly.variable("chi")


def test_degree_dominates():
  assert chi**2 > 1000 * chi
  assert 1000 * chi > 10**6
  assert not chi**2 < chi + 5


def test_leading_coefficient():
  assert 2 * chi**2 > chi**2 + chi
  assert (chi**2 + chi) < 2 * chi**2


def test_tied_leading_coefficient_compares_lower_terms():
  assert chi**2 + chi > chi**2 + 5
  assert chi**2 + 2 * chi + 1 > chi**2 + 2 * chi
  assert max([chi**3 + chi, chi**3 + 3, chi**3 + chi**2]) == chi**3 + chi**2


def test_constants():
  assert Poly.constant(3) == 3
  assert Poly.constant(2) < 3
  assert 4 > Poly.constant(3)
  assert Poly.constant(0) == Poly()
  assert hash(Poly.constant(3)) == hash(3)
  assert Poly.constant(5).is_constant


def test_arithmetic():
  p = (chi + 1) * (chi + 1)
  assert p == chi**2 + 2 * chi + 1
  assert p.degree == 2
  assert p.leading_coefficient == 1
  assert p.evaluate(3) == 16
  assert chi**0 == 1
  assert 0 + chi == chi


def test_repr():
  assert repr(2 * chi**2 + chi + 1) == "2*chi^2 + chi + 1"
  assert repr(Poly()) == "0"
  assert repr(Poly.constant(7)) == "7"


def test_default_symbol():
  assert Poly.variable().symbol == "chi"


def test_different_symbols():
  d = Poly.variable("d")
  with pytest.raises(IncomparableCost):
    _ = chi < d
  with pytest.raises(IncomparableCost):
    _ = chi + d
  assert chi != d
  assert issubclass(IncomparableCost, TypeError)


def test_nonconstant_needs_symbol():
  with pytest.raises(ValueError):
    Poly({1: 1})
  with pytest.raises(ValueError):
    Poly({-1: 1}, "chi")


def test_as_cost():
  assert as_cost(3) == Poly.constant(3)
  assert as_cost(chi) is chi
  with pytest.raises(ValueError):
    as_cost(-1)
  with pytest.raises(TypeError):
    as_cost("chi")


def test_uniform_model():
  model = CostModel.uniform()
  assert model.cost_of("a") == chi
  assert model.symbol == "chi"


def test_listed_model():
  model = CostModel.listed(["a", "b"])
  assert model.cost_of("a") == chi
  assert model.cost_of("c") == 1
  inverted = CostModel.listed(["a", "b"], invert=True)
  assert inverted.cost_of("a") == 1
  assert inverted.cost_of("c") == chi


def test_explicit_model():
  model = CostModel.explicit({"a": 2, "b": 3 * chi})
  assert model.cost_of("a") == 2
  assert model.cost_of("b") == 3 * chi
  assert model.cost_of("z") == 1
  assert model.symbol == "chi"
  assert CostModel.explicit({"a": 2}).symbol is None


def test_mixed_symbols_in_model():
  with pytest.raises(IncomparableCost):
    CostModel({"a": chi}, default=Poly.variable("d"))
