from dataclasses import dataclass, field


@dataclass(frozen=True)
class HttpConfig:
    timeout_seconds: float = 30.0
    connect_timeout_seconds: float = 10.0
    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


@dataclass(frozen=True)
class WeatherConfig:
    base_url: str = "https://api.openweathermap.org/data/2.5"
    units: str = "metric"
    lang: str = "en"


@dataclass(frozen=True)
class NewsConfig:
    base_url: str = "https://newsapi.org/v2"
    language: str = "en"
    default_country: str = "us"


@dataclass(frozen=True)
class RegistryConfig:
    strict: bool = False  # Reject unknown argument keys instead of ignoring them
    calculator_fallback: str = "add"  # "add" or "nan" for unknown operators


@dataclass(frozen=True)
class AgentConfig:
    model: str = "qwen2.5:1.5b"
    system_prompt: str = ""  # Overrides the rendered prompt template when set
    prompt_path: str = "prompts/system_prompt.txt"
    max_tool_rounds: int = 5
    temperature: float = 0.7
    num_ctx: int = 4096


@dataclass(frozen=True)
class SessionConfig:
    max_history_messages: int = 50


@dataclass(frozen=True)
class CacheConfig:
    max_entries: int = 128
    max_age_seconds: float = 7200.0
    sweep_interval_seconds: float = 30.0


@dataclass(frozen=True)
class ResourceConfig:
    id: str
    type: str
    name: str
    content: str
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    file: str | None = None
    max_bytes: int = 5_242_880
    backup_count: int = 3


@dataclass(frozen=True)
class AppConfig:
    http: HttpConfig = field(default_factory=HttpConfig)
    weather: WeatherConfig = field(default_factory=WeatherConfig)
    news: NewsConfig = field(default_factory=NewsConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    agent: AgentConfig = field(default_factory=AgentConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    resources: tuple[ResourceConfig, ...] = ()
    logging: LoggingConfig = field(default_factory=LoggingConfig)
