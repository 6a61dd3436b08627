"""Central configuration via Pydantic Settings. All values driven by env vars."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Upstream (OpenAI-compatible endpoint for embeddings and completions)
    upstream_api_key: str = ""
    upstream_base_url: str = "https://api.deepinfra.com/v1/openai"
    upstream_timeout_seconds: float = 600.0

    # Completion provider: "openai" (any OpenAI-compatible API) or "gemini"
    llm_provider: str = "openai"
    google_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"

    # Completion models
    default_model: str = "deepseek-ai/DeepSeek-V3.1"
    available_models: list[str] = [
        "Qwen/Qwen3-235B-A22B-Instruct-2507",
        "Qwen/Qwen3-Next-80B-A3B-Instruct",
        "meta-llama/Llama-4-Maverick-17B-128E-Instruct-FP8",
        "openai/gpt-oss-120b",
        "deepseek-ai/DeepSeek-V3.1",
        "moonshotai/Kimi-K2-Instruct-0905",
    ]
    generation_temperature: float = 0.7
    verification_temperature: float = 0.1
    verification_max_tokens: int = 800
    unverified_confidence: int = 85
    neutral_confidence: int = 50

    # Corpus registry (JSON file overriding the built-in table)
    corpus_registry_path: str = ""

    # Storage paths
    chunk_db_path: str = "data/chunks.db"
    job_db_path: str = "data/jobs.db"

    # Job lifecycle
    job_ttl_seconds: int = 3600
    job_sweep_interval_seconds: int = 300
    execute_on_submit: bool = True  # false when a separate worker calls the execute endpoint

    # Submission guard
    min_query_length: int = 3
    max_query_length: int = 1000
    rate_limit_window_seconds: int = 60
    rate_limit_max_requests: int = 3
    rate_limit_max_concurrent: int = 1

    # Request knob defaults
    default_complexity: str = "complex"
    default_max_chunks_per_paper: int = 3
    default_similarity_threshold: float = 0.3
    default_vector_weight: float = 0.7
    default_text_weight: float = 0.3

    # Retrieval
    context_max_distance: float = 0.5
    display_max_distance: float = 0.9
    display_limit: int = 100
    token_budget_pool: int = 50
    token_budget_reserve: int = 500
    lexical_normalizer: float = 10.0
    max_expanded_query_chars: int = 500
    max_lexical_terms: int = 8

    # Client polling
    poll_interval_seconds: float = 2.0
    poll_max_attempts: int = 90

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    shared_secret: str = ""  # static X-API-Key; empty disables the check
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_prefix": "LITQ_"}
