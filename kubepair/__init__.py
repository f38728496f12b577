"""kubepair shared library layer.

Logging, exceptions, error mapping, configuration and the cluster backend
collaborators used by the ``stress`` harness.
"""

__version__ = "0.1.0"
