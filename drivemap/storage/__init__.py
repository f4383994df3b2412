from .backend import StorageBackend
from .volume import Topology, Volume
