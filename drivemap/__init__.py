"""EBS volumes drive letters management library."""

__version__ = '0.1.0'

from .config import Config
from .remapper import Remapper, RemapReport
from .resolver import TopologyResolver
from .session import Session
from .storage import StorageBackend, Topology, Volume
from .tags import EC2TagLookup, StaticTagLookup, TagLookup
