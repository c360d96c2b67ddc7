"""Console Operator: reconciliation loop for the OpenShift web console."""

__version__ = "0.1.0"
