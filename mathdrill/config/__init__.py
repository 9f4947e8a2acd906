from .config import EngineConfig, load_config, to_engine_config, validate_config  # noqa: F401
