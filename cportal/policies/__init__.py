from cportal.policies.period_bucket import PeriodBucketPolicy
from cportal.policies.sequential import SequentialPolicy
from cportal.policy import FulfillmentPolicy
from cportal.schemas import EngineConfig

# --- Policy Registry ---
# Period bucket is the canonical policy; sequential is the strict FCFS variant.
POLICY_REGISTRY: dict[str, type[FulfillmentPolicy]] = {
    PeriodBucketPolicy.name: PeriodBucketPolicy,
    SequentialPolicy.name: SequentialPolicy,
}


def get_policy(config: EngineConfig) -> FulfillmentPolicy:
    """Instantiates the policy named by the configuration."""
    try:
        policy_cls = POLICY_REGISTRY[config.policy]
    except KeyError:
        raise ValueError(
            f"Unknown fulfillment policy {config.policy!r}; "
            f"expected one of {sorted(POLICY_REGISTRY)}"
        ) from None
    return policy_cls(config)


__all__ = [
    "POLICY_REGISTRY",
    "PeriodBucketPolicy",
    "SequentialPolicy",
    "get_policy",
]
