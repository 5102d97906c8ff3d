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
"""A bounded least-recently-used store for temporary buffers."""

import collections
import logging
import threading
from typing import Any, Hashable, Optional, Sequence, Text, Tuple, Union
import psutil
from tensorplan import config
from tensorplan.backend_contextmanager import get_default_backend
from tensorplan.backends import backend_factory
from tensorplan.backends.abstract_backend import AbstractBackend
Tensor = Any

_logger = logging.getLogger(__name__)


def total_memory() -> int:
  """Total physical memory of the machine in bytes."""
  return psutil.virtual_memory().total


def resolve_budget(maxsize: Optional[int] = None,
                   maxrelsize: Optional[float] = None) -> int:
  """Compute a byte budget from an absolute and/or a relative limit.

  Without arguments the budget is the smaller of
  `config.default_cache_maxsize` and `config.default_cache_maxrelsize`
  times the total memory. When both limits are given the smaller one wins.

  Args:
    maxsize: Budget in bytes.
    maxrelsize: Budget as a fraction in (0, 1] of the total memory.
  Returns:
    The budget in bytes.
  Raises:
    ValueError: If a limit is out of range.
  """
  if maxsize is None and maxrelsize is None:
    maxsize = config.default_cache_maxsize
    maxrelsize = config.default_cache_maxrelsize
  budgets = []
  if maxsize is not None:
    if isinstance(maxsize, bool) or int(maxsize) != maxsize or maxsize < 0:
      raise ValueError(
          "maxsize has to be a nonnegative number of bytes, got {}".format(
              maxsize))
    budgets.append(int(maxsize))
  if maxrelsize is not None:
    if not 0 < maxrelsize <= 1:
      raise ValueError(
          "maxrelsize has to be a fraction in (0, 1], got {}".format(
              maxrelsize))
    budgets.append(int(maxrelsize * total_memory()))
  return min(budgets)


class CacheEntry:
  """A registered buffer and the bookkeeping needed to recycle it."""

  __slots__ = ["key", "buffer", "shape", "dtype", "nbytes", "in_use"]

  def __init__(self, key: Hashable, buffer: Tensor, shape: Tuple[int, ...],
               dtype: Any, nbytes: int) -> None:
    self.key = key
    self.buffer = buffer
    self.shape = shape
    self.dtype = dtype
    self.nbytes = nbytes
    self.in_use = True

  def matches(self, shape: Tuple[int, ...], dtype: Any) -> bool:
    return self.shape == shape and self.dtype == dtype

  def __repr__(self) -> str:
    return "CacheEntry(key={!r}, shape={}, dtype={}, nbytes={})".format(
        self.key, self.shape, self.dtype, self.nbytes)


class CacheManager:
  """Thread-safe least-recently-used store of temporary buffers.

  Buffers are looked up by key. Keys built by `execute` have the form
  `(plan key, temporary index, execution context)`, so concurrent
  evaluations using distinct contexts never share a buffer. Bookkeeping
  is serialized by a lock; allocation of new buffers happens outside of
  it and a miss never waits for another thread.

  Only released entries are evicted, least recently used first. Eviction
  drops the reference held by the cache and the backend reclaims the
  buffer once it is unreferenced.

  Example:

    cache = CacheManager(maxsize=2**28)
    result = execute(compiled, tensors, cache=cache, context="worker-0")
  """

  def __init__(self,
               maxsize: Optional[int] = None,
               maxrelsize: Optional[float] = None,
               enabled: bool = True) -> None:
    self.maxsize = resolve_budget(maxsize, maxrelsize)
    self._entries = collections.OrderedDict()
    self._total_bytes = 0
    self._lock = threading.Lock()
    self.enabled = enabled
    self.hits = 0
    self.misses = 0

  def enable(self) -> None:
    self.enabled = True

  def disable(self) -> None:
    """Stop recycling buffers. Entries already cached are kept."""
    self.enabled = False

  def acquire(self,
              key: Hashable,
              shape: Sequence[int],
              dtype: Any,
              like: Optional[Tensor] = None,
              backend: Optional[Union[Text, AbstractBackend]] = None
             ) -> Tensor:
    """Get a buffer for `key`, reusing the cached one when it fits.

    A cached buffer is reused if it has the requested shape and element
    type and is not currently acquired; it then becomes the most recently
    used entry. Otherwise a new buffer is allocated through the backend
    and registered under `key`. A request for a key whose buffer is still
    acquired gets a fresh buffer that is not registered; pass the returned
    buffer to `release` so that only the registered one is released.

    Args:
      key: The cache key.
      shape: The shape of the requested buffer.
      dtype: The element type of the requested buffer.
      like: A reference buffer handed to `backend.allocate_like`.
      backend: The backend allocating new buffers.
    Returns:
      A buffer with undefined content.
    """
    shape = tuple(shape)
    register = False
    with self._lock:
      if self.enabled:
        entry = self._entries.get(key)
        if entry is not None and not entry.in_use:
          if entry.matches(shape, dtype):
            entry.in_use = True
            self._entries.move_to_end(key)
            self.hits += 1
            return entry.buffer
          self._remove(key)
          entry = None
        register = entry is None
      self.misses += 1

    if backend is None:
      backend = get_default_backend()
    backend_obj = backend_factory.get_backend(backend)
    buffer = backend_obj.allocate_like(like, dtype, shape)
    if not register:
      return buffer

    with self._lock:
      if key in self._entries:
        # another acquire for the same key registered first
        return buffer
      entry = CacheEntry(key, buffer, shape, dtype, backend_obj.nbytes(buffer))
      self._entries[key] = entry
      self._total_bytes += entry.nbytes
      _logger.debug("cached %d bytes for key %r, %d bytes in use", entry.nbytes,
                    key, self._total_bytes)
      self._evict()
    return buffer

  def release(self, key: Hashable, buffer: Optional[Tensor] = None) -> None:
    """Allow the buffer registered under `key` to be reused.

    The buffer is not freed, it only becomes evictable. If `buffer` is
    given, nothing happens unless it is the buffer registered under `key`,
    so a holder of an unregistered buffer for the same key cannot release
    the registered one. Releasing an unknown key does nothing.
    """
    with self._lock:
      entry = self._entries.get(key)
      if entry is None or (buffer is not None and entry.buffer is not buffer):
        return
      entry.in_use = False
      self._evict()

  def evict_until_within_budget(self) -> int:
    """Drop least recently used released entries until the budget is met.

    Entries still in use are never dropped, so the cache may stay above
    its budget until they are released.

    Returns:
      The number of dropped entries.
    """
    with self._lock:
      return self._evict()

  def _evict(self) -> int:
    evicted = 0
    if self._total_bytes > self.maxsize:
      released = [key for key, e in self._entries.items() if not e.in_use]
      for key in released:
        if self._total_bytes <= self.maxsize:
          break
        self._remove(key)
        evicted += 1
    if evicted:
      _logger.debug("evicted %d entries, %d bytes remain", evicted,
                    self._total_bytes)
    return evicted

  def _remove(self, key: Hashable) -> None:
    entry = self._entries.pop(key)
    self._total_bytes -= entry.nbytes

  def clear(self) -> None:
    with self._lock:
      self._entries.clear()
      self._total_bytes = 0

  def total_bytes(self) -> int:
    with self._lock:
      return self._total_bytes

  cache_size = total_bytes

  def keys(self) -> Tuple[Hashable, ...]:
    """Cached keys from least to most recently used."""
    with self._lock:
      return tuple(self._entries.keys())

  def __len__(self) -> int:
    with self._lock:
      return len(self._entries)

  def __contains__(self, key: Hashable) -> bool:
    with self._lock:
      return key in self._entries

  def __repr__(self) -> str:
    return "CacheManager(maxsize={}, entries={}, total_bytes={})".format(
        self.maxsize, len(self), self.total_bytes())
