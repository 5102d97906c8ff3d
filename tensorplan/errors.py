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
"""Exceptions raised while planning and executing contractions."""

from typing import Any, Optional, Sequence


class TensorPlanError(Exception):
  """Base class for all errors raised by tensorplan."""


class MalformedNetwork(TensorPlanError, ValueError):
  """A label occurs a wrong number of times in a network.

  Raised before any buffer is touched.
  """

  def __init__(self,
               message: str,
               label: Any = None,
               count: Optional[int] = None) -> None:
    super().__init__(message)
    self.label = label
    self.count = count


class DimensionMismatch(TensorPlanError, ValueError):
  """Two occurrences of the same label have different extents."""

  def __init__(self,
               message: str,
               label: Any = None,
               extents: Optional[Sequence[int]] = None) -> None:
    super().__init__(message)
    self.label = label
    self.extents = tuple(extents) if extents is not None else None


class IncomparableCost(TensorPlanError, TypeError):
  """Two cost values cannot be ordered, e.g. they use different variables."""
