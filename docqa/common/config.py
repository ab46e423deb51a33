"""
Configuration Management for DocQA

Loads configuration from ~/.docqa/config.json and environment variables.
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field

logger = logging.getLogger("docqa.common.config")

# Default config paths
CONFIG_DIR = Path.home() / ".docqa"
CONFIG_PATH = CONFIG_DIR / "config.json"
SNAPSHOT_PATH = CONFIG_DIR / "corpus.json"

GROQ_BASE_URL = "https://api.groq.com/openai/v1"


@dataclass
class LLMConfig:
    """Text generation providers for answering and query routing"""
    provider: str = "groq"
    router_provider: str = "groq"
    groq_api_key: str = ""
    groq_base_url: str = GROQ_BASE_URL
    groq_model: str = "llama-3.3-70b-versatile"
    groq_router_model: str = "llama-3.1-8b-instant"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_router_model: str = ""
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_router_model: str = "claude-haiku-4-5-20251001"
    google_api_key: str = ""
    google_model: str = "gemini-2.0-flash-lite"
    google_router_model: str = ""


@dataclass
class EmbeddingConfig:
    """Embedding model configuration"""
    provider: str = "google"
    model: str = "models/gemini-embedding-001"
    dimensions: int = 3072


@dataclass
class IndexConfig:
    """Similarity index configuration"""
    provider: str = "pinecone"  # "pinecone" or "memory"
    api_key: str = ""
    base_url: str = ""  # Pinecone index host, e.g. https://docs-xxxx.svc.pinecone.io
    index_name: str = "smartdocs"
    timeout: float = 10.0


@dataclass
class StoreConfig:
    """Field and corpus store configuration"""
    snapshot_path: str = str(SNAPSHOT_PATH)


@dataclass
class QnAConfig:
    """Answering pipeline tuning"""
    max_context_chars: int = 8000
    similarity_topk: int = 3
    search_default_results: int = 5
    router_max_tokens: int = 150
    router_temperature: float = 0.0
    generation_max_tokens: int = 1000
    generation_temperature: float = 0.1
    timeout: float = 30.0


@dataclass
class ServerConfig:
    """HTTP server configuration"""
    host: str = "0.0.0.0"
    port: int = 8085
    log_level: str = "INFO"


@dataclass
class DocQAConfig:
    """Main DocQA configuration"""
    llm: LLMConfig = field(default_factory=LLMConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    index: IndexConfig = field(default_factory=IndexConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    qna: QnAConfig = field(default_factory=QnAConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    _env_sourced_keys: set = field(default_factory=set, repr=False)

    def router_model(self) -> str:
        """Model name for the classifier, falling back to the generation model."""
        provider = (self.llm.router_provider or "").lower()
        if provider == "groq":
            return self.llm.groq_router_model or self.llm.groq_model
        if provider == "openai":
            return self.llm.openai_router_model or self.llm.openai_model
        if provider == "anthropic":
            return self.llm.anthropic_router_model or self.llm.anthropic_model
        if provider == "google":
            return self.llm.google_router_model or self.llm.google_model
        return ""

    def generation_model(self) -> str:
        provider = (self.llm.provider or "").lower()
        return getattr(self.llm, f"{provider}_model", "")


def _parse_llm_config(data: dict) -> LLMConfig:
    """Parse llm section from config dict"""
    llm_data = data.get("llm", {})
    defaults = LLMConfig()
    return LLMConfig(
        **{name: llm_data.get(name, getattr(defaults, name)) for name in vars(defaults)}
    )


def _parse_embedding_config(data: dict) -> EmbeddingConfig:
    """Parse embedding section from config dict"""
    embedding_data = data.get("embedding", {})
    return EmbeddingConfig(
        provider=embedding_data.get("provider", "google"),
        model=embedding_data.get("model", "models/gemini-embedding-001"),
        dimensions=int(embedding_data.get("dimensions", 3072)),
    )


def _parse_index_config(data: dict) -> IndexConfig:
    """Parse index section from config dict"""
    index_data = data.get("index", {})
    return IndexConfig(
        provider=index_data.get("provider", "pinecone"),
        api_key=index_data.get("api_key", ""),
        base_url=index_data.get("base_url", ""),
        index_name=index_data.get("index_name", "smartdocs"),
        timeout=float(index_data.get("timeout", 10.0)),
    )


def _parse_store_config(data: dict) -> StoreConfig:
    store_data = data.get("store", {})
    return StoreConfig(
        snapshot_path=store_data.get("snapshot_path", str(SNAPSHOT_PATH)),
    )


def _parse_qna_config(data: dict) -> QnAConfig:
    """Parse qna section from config dict"""
    qna_data = data.get("qna", {})
    return QnAConfig(
        max_context_chars=int(qna_data.get("max_context_chars", 8000)),
        similarity_topk=int(qna_data.get("similarity_topk", 3)),
        search_default_results=int(qna_data.get("search_default_results", 5)),
        router_max_tokens=int(qna_data.get("router_max_tokens", 150)),
        router_temperature=float(qna_data.get("router_temperature", 0.0)),
        generation_max_tokens=int(qna_data.get("generation_max_tokens", 1000)),
        generation_temperature=float(qna_data.get("generation_temperature", 0.1)),
        timeout=float(qna_data.get("timeout", 30.0)),
    )


def _parse_server_config(data: dict) -> ServerConfig:
    server_data = data.get("server", {})
    return ServerConfig(
        host=server_data.get("host", "0.0.0.0"),
        port=int(server_data.get("port", 8085)),
        log_level=server_data.get("log_level", "INFO"),
    )


def load_config() -> DocQAConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (~/.docqa/config.json)
    3. Default values
    """
    config = DocQAConfig()

    # Load from config file if exists
    if CONFIG_PATH.exists():
        try:
            with open(CONFIG_PATH) as f:
                data = json.load(f)

            config.llm = _parse_llm_config(data)
            config.embedding = _parse_embedding_config(data)
            config.index = _parse_index_config(data)
            config.store = _parse_store_config(data)
            config.qna = _parse_qna_config(data)
            config.server = _parse_server_config(data)
        except (json.JSONDecodeError, IOError, ValueError, TypeError) as e:
            logger.warning("Failed to load config file %s: %s", CONFIG_PATH, e)

    # LLM env var overrides (track env-sourced keys)
    _env_llm_map = {
        "GROQ_API_KEY": "groq_api_key",
        "GROQ_MODEL": "groq_model",
        "GROQ_ROUTING_MODEL": "groq_router_model",
        "OPENAI_API_KEY": "openai_api_key",
        "OPENAI_MODEL": "openai_model",
        "ANTHROPIC_API_KEY": "anthropic_api_key",
        "ANTHROPIC_MODEL": "anthropic_model",
        "GOOGLE_API_KEY": "google_api_key",
        "GEMINI_API_KEY": "google_api_key",
        "GOOGLE_MODEL": "google_model",
        "DOCQA_LLM_PROVIDER": "provider",
        "DOCQA_ROUTER_PROVIDER": "router_provider",
    }
    for env_var, attr in _env_llm_map.items():
        val = os.getenv(env_var)
        if val:
            setattr(config.llm, attr, val)
            config._env_sourced_keys.add(attr)

    if os.getenv("EMBEDDING_PROVIDER"):
        config.embedding.provider = os.getenv("EMBEDDING_PROVIDER")
    if os.getenv("EMBEDDING_MODEL"):
        config.embedding.model = os.getenv("EMBEDDING_MODEL")

    if os.getenv("DOCQA_INDEX_PROVIDER"):
        config.index.provider = os.getenv("DOCQA_INDEX_PROVIDER")
    if os.getenv("PINECONE_API_KEY"):
        config.index.api_key = os.getenv("PINECONE_API_KEY")
        config._env_sourced_keys.add("index_api_key")
    if os.getenv("PINECONE_BASE_URL"):
        config.index.base_url = os.getenv("PINECONE_BASE_URL")
    if os.getenv("PINECONE_INDEX_NAME"):
        config.index.index_name = os.getenv("PINECONE_INDEX_NAME")

    if os.getenv("DOCQA_SNAPSHOT_PATH"):
        config.store.snapshot_path = os.getenv("DOCQA_SNAPSHOT_PATH")

    if os.getenv("QNA_MAX_CONTEXT_CHARS"):
        config.qna.max_context_chars = int(os.getenv("QNA_MAX_CONTEXT_CHARS"))
    if os.getenv("QNA_TOPK"):
        config.qna.similarity_topk = int(os.getenv("QNA_TOPK"))

    if os.getenv("DOCQA_PORT"):
        config.server.port = int(os.getenv("DOCQA_PORT"))
    if os.getenv("DOCQA_LOG_LEVEL"):
        config.server.log_level = os.getenv("DOCQA_LOG_LEVEL")

    return config


def save_config(config: DocQAConfig) -> None:
    """Save configuration to file.

    API key fields that were sourced from environment variables are written
    as empty strings so that secrets are not persisted to disk.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    env_sourced = getattr(config, "_env_sourced_keys", set())

    llm_section = dict(vars(config.llm))
    for key in ("groq_api_key", "openai_api_key", "anthropic_api_key", "google_api_key"):
        if key in env_sourced:
            llm_section[key] = ""

    index_section = dict(vars(config.index))
    if "index_api_key" in env_sourced:
        index_section["api_key"] = ""

    data = {
        "llm": llm_section,
        "embedding": dict(vars(config.embedding)),
        "index": index_section,
        "store": dict(vars(config.store)),
        "qna": dict(vars(config.qna)),
        "server": dict(vars(config.server)),
    }

    with open(CONFIG_PATH, "w") as f:
        json.dump(data, f, indent=2)

    # Set secure permissions
    CONFIG_PATH.chmod(0o600)
