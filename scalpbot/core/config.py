"""
Application Configuration

All settings loaded from environment variables.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Application
    app_name: str = "Scalpbot"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # LLM Providers
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    llm_primary_provider: str = "openai"  # Options: openai, anthropic
    llm_signal_model: str = "gpt-4o"
    llm_opinion_model: str = "gpt-4o"
    llm_anthropic_model: str = "claude-3-5-sonnet-20241022"
    llm_temperature: float = 0.0
    llm_max_tokens: int = 1024
    llm_prompt_candles: int = 50  # Most recent candles per timeframe sent to the LLM

    # Indicator parameters
    ma_period: int = 20
    ema_period: int = 20
    rsi_period: int = 14
    stoch_k_period: int = 3
    stoch_d_period: int = 3
    bb_period: int = 20
    bb_multiplier: float = 2.0
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    atr_period: int = 14
    indicator_window: int = 3  # Trailing values per series in the snapshot
    atr_timeframe: str = "5m"

    # Rule-based fallback
    sideways_tolerance: float = 0.0005  # Max relative spread of last 3 closes

    # Exit levels (ATR-based)
    atr_stop_threshold: float = 0.003
    stop_loss_ratio: float = 0.985
    stop_atr_multiplier: float = 2.0
    take_profit_atr_multipliers: list[float] = [3.2, 5.5]
    trailing_atr_multiplier: float = 0.9
    tp1_close_ratio: float = 0.6
    max_stop_loss_change: float = 0.025  # Fraction of current price
    max_take_profit_changes: list[float] = [0.05, 0.1]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
