import numpy as np
import pytest
import tensorplan
from tensorplan.backend_contextmanager import (_default_backend_stack,
                                               get_default_backend)
from tensorplan.backends.numpy.numpy_backend import NumPyBackend


def test_contextmanager_simple():
  with tensorplan.DefaultBackend("numpy"):
    assert get_default_backend() == "numpy"


def test_contextmanager_default_backend():
  backend_obj = NumPyBackend()
  tensorplan.set_default_backend(backend_obj)
  with tensorplan.DefaultBackend("numpy"):
    assert _default_backend_stack.default_backend is backend_obj
    assert get_default_backend() == "numpy"
  assert get_default_backend() is backend_obj


def test_contextmanager_interruption():
  with pytest.raises(AssertionError):
    with tensorplan.DefaultBackend("numpy"):
      tensorplan.set_default_backend("numpy")


def test_contextmanager_nested():
  backend_obj = NumPyBackend()
  with tensorplan.DefaultBackend(backend_obj):
    assert get_default_backend() is backend_obj
    with tensorplan.DefaultBackend("numpy"):
      assert get_default_backend() == "numpy"
    assert get_default_backend() is backend_obj
  assert get_default_backend() == "numpy"


def test_contextmanager_wrong_item():
  with pytest.raises(ValueError):
    tensorplan.DefaultBackend(np.ones(3))  # pytype: disable=wrong-arg-types


def test_contextmanager_used_by_ncon():
  backend_obj = NumPyBackend()
  with tensorplan.DefaultBackend(backend_obj):
    result = tensorplan.ncon([np.ones((2, 2)), np.ones((2, 2))],
                             [(-1, 1), (1, -2)])
  np.testing.assert_allclose(result, 2 * np.ones((2, 2)))


def test_set_default_backend_value_error():
  with pytest.raises(
      ValueError,
      match="Item passed to set_default_backend "
      "must be Text or AbstractBackend"):
    tensorplan.set_default_backend(-1)  # pytype: disable=wrong-arg-types


def test_set_default_backend_unknown_name():
  with pytest.raises(ValueError, match="was not found"):
    tensorplan.set_default_backend("tensorflow")
