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
import numpy as np
import tensorplan
from tensorplan import ncon_interface


@pytest.fixture(name="backend", params=["numpy"])
def backend_fixture(request):
  return request.param


@pytest.fixture(autouse=True)
def reset_default_backend():
  tensorplan.set_default_backend("numpy")
  yield
  tensorplan.set_default_backend("numpy")


@pytest.fixture(autouse=True)
def clear_plan_cache():
  ncon_interface.clear_plan_cache()
  yield
  ncon_interface.clear_plan_cache()


@pytest.fixture(name="rng")
def rng_fixture():
  return np.random.RandomState(10)
