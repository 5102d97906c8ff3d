from tensorplan.errors import (TensorPlanError, MalformedNetwork,
                               DimensionMismatch, IncomparableCost)
from tensorplan.network import (TensorFactor, ContractionNetwork,
                                build_network, check_network, default_output)
from tensorplan.cost_model import CostModel, Poly
from tensorplan.compiler import (CompiledPlan, compile_tree, plan,
                                 optimal_contraction_tree)
from tensorplan.execution import execute
from tensorplan.cache import CacheManager
from tensorplan.ncon_interface import ncon
from tensorplan.operations import (tensorcopy, tensoradd, tensortrace,
                                   tensorcontract, tensorproduct)
from tensorplan.backends.abstract_backend import AbstractBackend
from tensorplan.backend_contextmanager import DefaultBackend
from tensorplan.backend_contextmanager import set_default_backend
from tensorplan.visualization.graphviz import to_graphviz
from tensorplan import contractors
from tensorplan.version import __version__
