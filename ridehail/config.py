"""Centralised application settings loaded from environment / .env file."""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Fare estimation
    base_fare: float = 30.0  # INR
    rate_per_km: float = 10.0  # INR / km, before category multiplier
    max_surge_fraction: float = 0.5  # surge <= 50 % of distance fare
    eta_base_minutes: int = 2
    eta_min_minutes_per_km: float = 2.0
    eta_max_minutes_per_km: float = 5.0
    min_eta_minutes: int = 2

    # Matching engine
    min_simulated_distance_km: float = 1.0
    max_simulated_distance_km: float = 11.0
    category_mismatch_penalty_km: float = 2.0

    # Cancellation policy
    free_cancellation_minutes: int = 2
    min_cancellation_fee: float = 20.0  # INR
    cancellation_fee_rate: float = 0.10  # of estimated fare

    # Promos
    default_promo_uses: int = 5

    # Randomness (None -> seeded from the OS)
    random_seed: Optional[int] = None

    # API
    admin_token: str = "admin123"
    rate_limit: str = "100/minute"
    rate_limit_enabled: bool = True
    seed_demo_data: bool = True
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
