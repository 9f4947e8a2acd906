from .schema import ResultModel, SessionBlob, SettingsBlob, SkillStatsModel
from .store import (
    BlobStore,
    JsonFileStore,
    MemoryStore,
    decode_session_blob,
    decode_settings_blob,
    encode_session_blob,
    safe_read,
    safe_write,
)

__all__ = [
    "ResultModel",
    "SessionBlob",
    "SettingsBlob",
    "SkillStatsModel",
    "BlobStore",
    "JsonFileStore",
    "MemoryStore",
    "decode_session_blob",
    "decode_settings_blob",
    "encode_session_blob",
    "safe_read",
    "safe_write",
]
