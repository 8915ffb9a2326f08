"""Tekton Actions - reconcile declarative actions into Tekton Tasks and StepActions."""

__version__ = "1.0.0"
