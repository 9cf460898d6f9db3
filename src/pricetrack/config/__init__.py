"""Configuration helpers for pricing policies."""

from .policy import DEFAULT_POLICY, PricingPolicy, get_policy, iter_policies, policy_from_env

__all__ = [
    "DEFAULT_POLICY",
    "PricingPolicy",
    "get_policy",
    "iter_policies",
    "policy_from_env",
]
