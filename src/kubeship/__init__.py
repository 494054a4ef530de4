"""
kubeship - build, push and expose a containerised app on an IBM Cloud
Kubernetes cluster.

- kubeship.core: errors, structured logging, settings
- kubeship.deploy: the action registry, external tool runner and actions
- kubeship.cli: the ``kubeship`` command
"""

__version__ = "0.1.0"
