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

default_backend = "numpy"

# budget of the temporary cache: the smaller of an absolute number of bytes
# and a fraction of the total memory of the machine.
default_cache_maxsize = 2**30
default_cache_maxrelsize = 0.25

# name of the scaling variable used by `CostModel.uniform` and
# `CostModel.listed` when none is given.
default_cost_symbol = "chi"
