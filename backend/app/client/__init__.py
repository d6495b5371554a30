"""Clients consuming the plan API."""
from .plan_context import PLAN_ENDPOINT, PlanClient

__all__ = ["PLAN_ENDPOINT", "PlanClient"]
