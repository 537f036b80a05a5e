import os

from evswap.plan.emissions import DEFAULT_COST_PER_KM, DEFAULT_EMISSION_KG_PER_KM, Rates

def read_rate_env_defaults() -> Rates:
    def pick(*names, default=None):
        for n in names:
            v = os.getenv(n)
            if v not in (None, ""):
                return v
        return default

    return Rates(
        emission_kg_per_km={
            "Gas": float(pick("EMISSION_GAS_KG_PER_KM", "EMISSION_RATE_GAS", default=str(DEFAULT_EMISSION_KG_PER_KM["Gas"]))),
            "EV": float(pick("EMISSION_EV_KG_PER_KM", "EMISSION_RATE_EV", default=str(DEFAULT_EMISSION_KG_PER_KM["EV"]))),
            "Mix": float(pick("EMISSION_MIX_KG_PER_KM", "EMISSION_RATE_MIX", default=str(DEFAULT_EMISSION_KG_PER_KM["Mix"]))),
        },
        cost_per_km={
            "Gas": float(pick("COST_GAS_PER_KM", "COST_PER_KM_GAS", default=str(DEFAULT_COST_PER_KM["Gas"]))),
            "EV": float(pick("COST_EV_PER_KM", "COST_PER_KM_EV", default=str(DEFAULT_COST_PER_KM["EV"]))),
            "Mix": float(pick("COST_MIX_PER_KM", "COST_PER_KM_MIX", default=str(DEFAULT_COST_PER_KM["Mix"]))),
        },
        currency=pick("COST_CURRENCY", default="CZK"),
    )
