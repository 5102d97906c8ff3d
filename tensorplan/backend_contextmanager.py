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
from typing import Text, Union
from tensorplan import config
from tensorplan.backends.abstract_backend import AbstractBackend
from tensorplan.backends import backend_factory


class DefaultBackend():
  """Context manager selecting the backend used by `execute` and `ncon`."""

  def __init__(self, backend: Union[Text, AbstractBackend]) -> None:
    if not isinstance(backend, (Text, AbstractBackend)):
      raise ValueError("Item passed to DefaultBackend "
                       "must be Text or AbstractBackend")
    self.backend = backend

  def __enter__(self):
    _default_backend_stack.stack.append(self)

  def __exit__(self, exc_type, exc_val, exc_tb):
    _default_backend_stack.stack.pop()


class _DefaultBackendStack():
  """A stack to keep track of the default backend context managers"""

  def __init__(self):
    self.stack = []
    self.default_backend = config.default_backend

  def get_current_backend(self):
    return self.stack[-1].backend if self.stack else self.default_backend


_default_backend_stack = _DefaultBackendStack()


def get_default_backend():
  return _default_backend_stack.get_current_backend()


def set_default_backend(backend: Union[Text, AbstractBackend]) -> None:
  if _default_backend_stack.stack:
    raise AssertionError("The default backend should not be changed "
                         "inside the backend context manager")
  if not isinstance(backend, (Text, AbstractBackend)):
    raise ValueError("Item passed to set_default_backend "
                     "must be Text or AbstractBackend")
  if isinstance(backend, Text) and backend not in backend_factory._BACKENDS:
    raise ValueError(f"Backend '{backend}' was not found.")
  _default_backend_stack.default_backend = backend
