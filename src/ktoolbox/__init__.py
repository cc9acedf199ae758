"""ktoolbox - Run a throwaway privileged debug pod in a Kubernetes cluster."""

__version__ = "0.3.0"
